"""RiskEngine — the per-tick pipeline and the command surface.

Per audio tick, in this order and against one set of inputs:
    capture features → fuse → auto-escalation check
Per countdown tick:
    expiry check → fire (submission runs as a background task)

All of the above are synchronous; the only suspension points are sampler
initialization in ``start()`` and the alert submission itself.  Because
the engine runs on a single event loop, no two of these steps interleave.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from aurora_sentinel.core.countdown import CountdownController
from aurora_sentinel.core.escalation import AutoEscalationMonitor
from aurora_sentinel.core.fusion import fuse
from aurora_sentinel.domain.enums import SensorKind, TriggerKind
from aurora_sentinel.domain.errors import SensorUnavailable, SubmissionFailed
from aurora_sentinel.domain.escalation import (
    Armed,
    CountdownHandle,
    FireOutcome,
    Fired,
    Idle,
)
from aurora_sentinel.domain.features import AudioFeatures, MotionFeatures
from aurora_sentinel.domain.risk import RiskSnapshot
from aurora_sentinel.domain.zone import GeoPoint, LocationContext
from aurora_sentinel.foundation.clock import utc_now
from aurora_sentinel.sensors.audio import AudioSampler
from aurora_sentinel.sensors.motion import MotionSampler
from aurora_sentinel.sensors.sources import MotionEvent
from aurora_sentinel.store.zone_cache import ZoneCache
from aurora_sentinel.transport.base import AlertTransport

logger = logging.getLogger(__name__)


class RiskEngine:
    """Owns the samplers, zone cache, escalation monitor and countdown.

    Args:
        audio: Polled audio sampler.
        motion: Event-driven motion sampler.
        transport: Alert/zone backend.
        zones: Zone cache; an empty one is created if omitted.
        cooldown: Minimum interval between automatic armings.
        countdown: Countdown length.
        presentation_mode: Start with the demo overrides on.
        tz_name: IANA zone for time-of-day scoring.
    """

    def __init__(
        self,
        audio: AudioSampler,
        motion: MotionSampler,
        transport: AlertTransport,
        zones: Optional[ZoneCache] = None,
        cooldown: timedelta = timedelta(seconds=10),
        countdown: timedelta = timedelta(seconds=10),
        presentation_mode: bool = False,
        tz_name: str = "UTC",
    ) -> None:
        self._audio = audio
        self._motion = motion
        self._transport = transport
        self._zones = zones if zones is not None else ZoneCache()
        self._monitor = AutoEscalationMonitor(cooldown=cooldown)
        self._controller = CountdownController(transport, self._monitor, duration=countdown)
        self._tz_name = tz_name

        self._presentation_mode = False
        self.set_presentation_mode(presentation_mode)

        self._audio_features = AudioFeatures.zero()
        self._motion_features = MotionFeatures.zero()
        self._position: Optional[GeoPoint] = None
        self._location: Optional[LocationContext] = None
        self._unavailable: dict[SensorKind, str] = {}
        self._pending: set[asyncio.Task] = set()

        self._snapshot = self._fuse(utc_now())

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Initialize both samplers.  One failing does not stop the other."""
        for kind, sampler in ((SensorKind.AUDIO, self._audio), (SensorKind.MOTION, self._motion)):
            try:
                await sampler.initialize()
            except SensorUnavailable as exc:
                self._unavailable[kind] = exc.reason
                logger.warning("%s; continuing with zero features", exc)

    def stop(self) -> None:
        self._audio.stop()
        self._motion.stop()

    @property
    def sensor_status(self) -> dict[str, str]:
        return {
            kind.value: self._unavailable.get(kind, "active" if sampler.active else "stopped")
            for kind, sampler in ((SensorKind.AUDIO, self._audio), (SensorKind.MOTION, self._motion))
        }

    # ── Ticks ────────────────────────────────────────────────────────────

    def tick(self, now: Optional[datetime] = None) -> RiskSnapshot:
        """Capture → fuse → escalate, against a single consistent input set."""
        now = now or utc_now()
        self._audio_features = self._audio.sample()
        snapshot = self._fuse(now)
        self._snapshot = snapshot
        self._monitor.evaluate(snapshot, now, self._controller)
        return snapshot

    def countdown_tick(self, now: Optional[datetime] = None) -> Optional[asyncio.Task]:
        """Fire the running arming if its deadline has passed.

        Returns the background submission task, if one was started.
        """
        now = now or utc_now()
        if not self._controller.is_due(now):
            return None
        request = self._controller.begin_fire(now, self._snapshot, self._location)
        if request is None:
            return None
        logger.info("Countdown %s expired", request.arming_id)
        task = asyncio.ensure_future(self._controller.complete_fire(request))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    # ── Inputs ───────────────────────────────────────────────────────────

    def on_motion_event(self, event: MotionEvent) -> MotionFeatures:
        self._motion_features = self._motion.on_raw_event(event)
        return self._motion_features

    def update_location(self, point: Optional[GeoPoint]) -> Optional[LocationContext]:
        """New GPS fix, or None when the position is lost."""
        self._position = point
        self._location = self._zones.locate(point) if point is not None else None
        return self._location

    async def refresh_zones(self) -> int:
        """Reload zones from the transport; keeps the old set on failure."""
        try:
            zones = await self._transport.fetch_zones()
        except SubmissionFailed as exc:
            logger.warning("Zone refresh failed, keeping %d zone(s): %s", len(self._zones), exc.reason)
            return len(self._zones)
        count = self._zones.replace(zones)
        if self._position is not None:
            self._location = self._zones.locate(self._position)
        return count

    # ── Configuration ────────────────────────────────────────────────────

    def set_heightened_sensitivity(self, enabled: bool) -> None:
        self._audio.set_heightened_sensitivity(enabled)
        logger.info("Heightened audio sensitivity %s", "on" if enabled else "off")

    def set_presentation_mode(self, enabled: bool) -> None:
        """Demo mode forces the location score to its cap and heightens audio."""
        self._presentation_mode = enabled
        self._audio.set_heightened_sensitivity(enabled)
        logger.info("Presentation mode %s", "on" if enabled else "off")

    @property
    def presentation_mode(self) -> bool:
        return self._presentation_mode

    @property
    def heightened_sensitivity(self) -> bool:
        return self._audio.heightened

    # ── Commands ─────────────────────────────────────────────────────────

    def arm_manual(self, now: Optional[datetime] = None) -> CountdownHandle:
        """User pressed the SOS button.  Raises ArmingRejected if busy."""
        return self._controller.arm(TriggerKind.MANUAL, now or utc_now())

    def cancel(self, now: Optional[datetime] = None) -> bool:
        return self._controller.cancel(now or utc_now())

    async def send_now(self, now: Optional[datetime] = None) -> Optional[FireOutcome]:
        return await self._controller.send_now(now or utc_now(), self._snapshot, self._location)

    # ── Read-only views ──────────────────────────────────────────────────

    def get_current_snapshot(self) -> RiskSnapshot:
        return self._snapshot

    def get_escalation_state(self) -> Union[Idle, Armed, Fired]:
        return self._controller.state

    @property
    def audio_features(self) -> AudioFeatures:
        return self._audio_features

    @property
    def motion_features(self) -> MotionFeatures:
        return self._motion_features

    @property
    def location(self) -> Optional[LocationContext]:
        return self._location

    @property
    def zones(self) -> ZoneCache:
        return self._zones

    @property
    def last_outcome(self) -> Optional[FireOutcome]:
        return self._controller.last_outcome

    def escalation_summary(self, now: Optional[datetime] = None) -> dict:
        """State plus derived countdown/cooldown figures, for the UI."""
        now = now or utc_now()
        state = self._controller.state
        outcome = self._controller.last_outcome
        return {
            "state": state.model_dump(mode="json"),
            "retry_available": isinstance(state, Idle) and state.retry_available,
            "countdown": self._controller.remaining(now),
            "auto_triggered": self._monitor.auto_triggered,
            "cooldown_remaining": round(self._monitor.cooldown_remaining(now), 3),
            "last_outcome": outcome.model_dump(mode="json") if outcome else None,
        }

    # ── Internals ────────────────────────────────────────────────────────

    def _fuse(self, now: datetime) -> RiskSnapshot:
        return fuse(
            self._audio_features,
            self._motion_features,
            self._location,
            self._presentation_mode,
            now,
            tz_name=self._tz_name,
        )
