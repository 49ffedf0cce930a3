"""AutoEscalationMonitor — decides when the risk stream arms a countdown.

Idle → Armed(AUTO) happens only when all of:
    (a) the snapshot level is HIGH,
    (b) at least *cooldown* has passed since the last auto arm, cancel
        or fire,
    (c) nothing is armed or firing, and the auto latch is clear.

Once an auto arming exists the monitor stays latched until the countdown
controller reports a resolution, so a transient score dip cannot disarm
a running countdown.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional

from aurora_sentinel.domain.enums import RiskLevel, TriggerKind
from aurora_sentinel.domain.escalation import CountdownHandle
from aurora_sentinel.domain.risk import RiskSnapshot

if TYPE_CHECKING:
    from aurora_sentinel.core.countdown import CountdownController

logger = logging.getLogger(__name__)


class AutoEscalationMonitor:
    """Cooldown-guarded, latching trigger for automatic armings."""

    def __init__(self, cooldown: timedelta = timedelta(seconds=10)) -> None:
        self._cooldown = cooldown
        self._last_event_at: Optional[datetime] = None
        self._auto_triggered = False

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def auto_triggered(self) -> bool:
        return self._auto_triggered

    @property
    def last_event_at(self) -> Optional[datetime]:
        return self._last_event_at

    def cooldown_remaining(self, now: datetime) -> float:
        """Seconds until the cooldown permits another auto arming."""
        if self._last_event_at is None:
            return 0.0
        left = (self._last_event_at + self._cooldown - now).total_seconds()
        return max(left, 0.0)

    def should_arm(self, snapshot: RiskSnapshot, now: datetime, arming_in_progress: bool) -> bool:
        if snapshot.level != RiskLevel.HIGH:
            return False
        if self._auto_triggered or arming_in_progress:
            return False
        return self.cooldown_remaining(now) == 0.0

    # ── Transitions ──────────────────────────────────────────────────────

    def evaluate(
        self,
        snapshot: RiskSnapshot,
        now: datetime,
        controller: "CountdownController",
    ) -> Optional[CountdownHandle]:
        """Arm *controller* automatically if the snapshot warrants it."""
        if not self.should_arm(snapshot, now, arming_in_progress=not controller.is_idle):
            return None
        handle = controller.arm(TriggerKind.AUTO, now)
        self.record_arm(now)
        logger.info(
            "Auto-escalation armed %s (total=%.1f, deadline=%s)",
            handle.arming_id,
            snapshot.total,
            handle.deadline.isoformat(),
        )
        return handle

    def record_arm(self, now: datetime) -> None:
        self._auto_triggered = True
        self._last_event_at = now

    def record_resolution(self, now: datetime) -> None:
        """A cancel of an auto arming, or any successful fire."""
        self._auto_triggered = False
        self._last_event_at = now

    def record_failure(self) -> None:
        """Submission failed: clear the latch, leave the cooldown clock alone."""
        self._auto_triggered = False
