"""CountdownController — runs an arming to exactly one resolution.

Every Armed state leaves by exactly one of:
    expire    deadline reached → fire
    send-now  user fast-forward → fire
    cancel    discard without firing
and every Fired state leaves by submission success or failure, both of
which land in Idle.

Fire-once guarantee:
    ``_sent`` is set synchronously, before the first await, by whichever
    fire path gets there first.  A concurrent expiry and send-now on the
    same loop therefore produce a single submit_alert call.  A failed
    submission releases the latch and returns to Idle, so the user must
    re-arm to retry.  The failure also leaves the auto-escalation cooldown
    clock where the arm set it, so automatic re-arming still waits out the
    rest of that cooldown while a manual re-arm is allowed at once.

Deadlines are wall-clock: a host that was paused past the deadline fires
on the first countdown tick after it resumes.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from aurora_sentinel.core.escalation import AutoEscalationMonitor
from aurora_sentinel.domain.enums import TriggerKind
from aurora_sentinel.domain.errors import ArmingRejected, SubmissionFailed
from aurora_sentinel.domain.escalation import (
    AlertRequest,
    Armed,
    CountdownHandle,
    FireOutcome,
    Fired,
    Idle,
)
from aurora_sentinel.domain.risk import RiskSnapshot
from aurora_sentinel.domain.zone import LocationContext
from aurora_sentinel.foundation.clock import utc_now
from aurora_sentinel.foundation.identifiers import new_id
from aurora_sentinel.transport.base import AlertTransport

logger = logging.getLogger(__name__)


class CountdownController:
    """Sole owner of the process-wide EscalationState cell.

    Args:
        transport: Where fired alerts are submitted.
        monitor: Auto-escalation monitor to notify on resolutions.
        duration: Countdown length from arm to expiry.
    """

    def __init__(
        self,
        transport: AlertTransport,
        monitor: Optional[AutoEscalationMonitor] = None,
        duration: timedelta = timedelta(seconds=10),
    ) -> None:
        self._transport = transport
        self._monitor = monitor
        self._duration = duration
        self._state: Union[Idle, Armed, Fired] = Idle()
        self._handle: Optional[CountdownHandle] = None
        self._sent = False
        self._last_outcome: Optional[FireOutcome] = None

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def state(self) -> Union[Idle, Armed, Fired]:
        return self._state

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    @property
    def handle(self) -> Optional[CountdownHandle]:
        return self._handle

    @property
    def last_outcome(self) -> Optional[FireOutcome]:
        return self._last_outcome

    def remaining(self, now: datetime) -> Optional[int]:
        """Whole seconds left on the running countdown, or None if not armed."""
        if not isinstance(self._state, Armed) or self._handle is None:
            return None
        return self._handle.remaining(now)

    def is_due(self, now: datetime) -> bool:
        return isinstance(self._state, Armed) and now >= self._state.deadline

    # ── Arm / cancel ─────────────────────────────────────────────────────

    def arm(self, kind: TriggerKind, now: datetime) -> CountdownHandle:
        """Start a countdown.

        Raises:
            ArmingRejected: If an arming is already armed or firing.
        """
        if not self.is_idle:
            raise ArmingRejected(f"cannot arm while {self._state.phase.value}")

        handle = CountdownHandle(
            arming_id=new_id(),
            trigger_kind=kind,
            armed_at=now,
            deadline=now + self._duration,
        )
        self._sent = False
        self._handle = handle
        self._state = Armed(
            arming_id=handle.arming_id,
            trigger_kind=kind,
            armed_at=handle.armed_at,
            deadline=handle.deadline,
        )
        logger.info("Armed %s countdown %s", kind.value, handle.arming_id)
        return handle

    def cancel(self, now: datetime) -> bool:
        """Discard the running arming without firing.  False if nothing was armed."""
        state = self._state
        if not isinstance(state, Armed):
            return False

        self._state = Idle()
        self._handle = None
        if state.trigger_kind == TriggerKind.AUTO and self._monitor is not None:
            self._monitor.record_resolution(now)
        logger.info("Cancelled %s countdown %s", state.trigger_kind.value, state.arming_id)
        return True

    # ── Fire ─────────────────────────────────────────────────────────────

    def begin_fire(
        self,
        now: datetime,
        snapshot: RiskSnapshot,
        location: Optional[LocationContext] = None,
    ) -> Optional[AlertRequest]:
        """Claim the fire latch.  Returns None if another path already fired."""
        state = self._state
        if self._sent or not isinstance(state, Armed):
            return None
        self._sent = True

        self._state = Fired(
            arming_id=state.arming_id,
            trigger_kind=state.trigger_kind,
            fired_at=now,
        )
        self._handle = None
        return AlertRequest(
            arming_id=state.arming_id,
            score=snapshot.total,
            factors=snapshot.factor_breakdown(),
            location=location,
            trigger_kind=state.trigger_kind,
        )

    async def complete_fire(self, request: AlertRequest) -> FireOutcome:
        """Submit a claimed alert and resolve Fired → Idle."""
        try:
            alert_id = await self._transport.submit_alert(request)
        except SubmissionFailed as exc:
            return self._on_failure(request, exc.reason)
        except Exception as exc:
            logger.error("Unexpected transport error for %s", request.arming_id, exc_info=True)
            return self._on_failure(request, str(exc) or type(exc).__name__)

        self._state = Idle()
        if self._monitor is not None:
            self._monitor.record_resolution(utc_now())
        outcome = FireOutcome(
            arming_id=request.arming_id,
            trigger_kind=request.trigger_kind,
            delivered=True,
            alert_id=alert_id,
        )
        self._last_outcome = outcome
        logger.info("Alert %s delivered for arming %s", alert_id, request.arming_id)
        return outcome

    async def fire(
        self,
        now: datetime,
        snapshot: RiskSnapshot,
        location: Optional[LocationContext] = None,
    ) -> Optional[FireOutcome]:
        """Fire the current arming.  None if nothing was armed or it already fired."""
        request = self.begin_fire(now, snapshot, location)
        if request is None:
            return None
        return await self.complete_fire(request)

    async def send_now(
        self,
        now: datetime,
        snapshot: RiskSnapshot,
        location: Optional[LocationContext] = None,
    ) -> Optional[FireOutcome]:
        """User fast-forward: skip the remaining countdown and fire."""
        if isinstance(self._state, Armed):
            logger.info("Send-now requested for %s", self._state.arming_id)
        return await self.fire(now, snapshot, location)

    # ── Internals ────────────────────────────────────────────────────────

    def _on_failure(self, request: AlertRequest, reason: str) -> FireOutcome:
        self._sent = False
        self._state = Idle(last_failure=reason)
        if request.trigger_kind == TriggerKind.AUTO and self._monitor is not None:
            self._monitor.record_failure()
        outcome = FireOutcome(
            arming_id=request.arming_id,
            trigger_kind=request.trigger_kind,
            delivered=False,
            error=reason,
        )
        self._last_outcome = outcome
        logger.warning("Alert submission failed for arming %s: %s", request.arming_id, reason)
        return outcome
