"""EscalationState — the tagged union owned by the countdown controller.

    Idle ──arm──▶ Armed ──expire / send-now──▶ Fired ──ok──▶ Idle
                    │                            │
                    └──cancel──▶ Idle            └──fail──▶ Idle(last_failure)

Only one Armed/Fired cycle may be active at a time, and a new arming is
only possible from Idle.  The UI observes these values; it never builds
them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from aurora_sentinel.domain.enums import EscalationPhase, TriggerKind
from aurora_sentinel.domain.zone import LocationContext


class Idle(BaseModel):
    """Nothing armed.

    ``last_failure`` is set when the previous cycle fired but the alert
    could not be delivered, so the UI can re-offer a retry affordance.
    """

    phase: Literal[EscalationPhase.IDLE] = EscalationPhase.IDLE
    last_failure: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def retry_available(self) -> bool:
        return self.last_failure is not None


class Armed(BaseModel):
    """A countdown is running towards *deadline* (wall-clock)."""

    phase: Literal[EscalationPhase.ARMED] = EscalationPhase.ARMED
    arming_id: UUID
    trigger_kind: TriggerKind
    armed_at: datetime
    deadline: datetime

    model_config = {"frozen": True}


class Fired(BaseModel):
    """The alert for *arming_id* is being submitted."""

    phase: Literal[EscalationPhase.FIRED] = EscalationPhase.FIRED
    arming_id: UUID
    trigger_kind: TriggerKind
    fired_at: datetime

    model_config = {"frozen": True}


EscalationState = Annotated[Union[Idle, Armed, Fired], Field(discriminator="phase")]


# ── Handles and alert payloads ───────────────────────────────────────────────

class CountdownHandle(BaseModel):
    """Returned by arm(); identifies one arming and its deadline."""

    arming_id: UUID
    trigger_kind: TriggerKind
    armed_at: datetime
    deadline: datetime

    model_config = {"frozen": True}

    def remaining(self, now: datetime) -> int:
        """Whole seconds left, rounded up, never negative."""
        left = (self.deadline - now).total_seconds()
        if left <= 0:
            return 0
        whole = int(left)
        return whole if whole == left else whole + 1


class AlertRequest(BaseModel):
    """What the countdown hands to the transport when it fires."""

    arming_id: UUID
    score: float = Field(..., ge=0.0, le=100.0)
    factors: dict[str, float]
    location: Optional[LocationContext] = None
    trigger_kind: TriggerKind

    model_config = {"frozen": True}


class FireOutcome(BaseModel):
    """Result of one fire attempt."""

    arming_id: UUID
    trigger_kind: TriggerKind
    delivered: bool
    alert_id: Optional[str] = None
    error: Optional[str] = None

    model_config = {"frozen": True}
