"""Controlled enumerations for the aurora-sentinel domain.

Every categorical field in the domain MUST reference an enum defined here.
"""

from __future__ import annotations

from enum import Enum


class ZoneKind(str, Enum):
    """Risk classification an administrator assigns to a polygon zone."""

    HIGH = "high"
    LOW = "low"


class RiskLevel(str, Enum):
    """Three-level threat classification of a fused risk total."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TriggerKind(str, Enum):
    """Who armed the countdown.

    The wire value of AUTO is ``"ai"`` because that is what the alert
    backend stores as ``trigger_type``.
    """

    MANUAL = "manual"
    AUTO = "ai"


class EscalationPhase(str, Enum):
    """Tag of the EscalationState union."""

    IDLE = "idle"
    ARMED = "armed"
    FIRED = "fired"


class SensorKind(str, Enum):
    AUDIO = "audio"
    MOTION = "motion"
