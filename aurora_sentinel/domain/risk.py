"""RiskSnapshot — one fused risk evaluation at a point in time.

A snapshot is recomputed from scratch on every tick and carries no
history.  Each factor reports the normalized value that drove it and
its capped contribution to the 0-100 total.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from aurora_sentinel.domain.enums import RiskLevel


class AudioFactor(BaseModel):
    stress: float = Field(..., ge=0.0, le=1.0)
    score: float = Field(..., ge=0.0, le=35.0)

    model_config = {"frozen": True}


class MotionFactor(BaseModel):
    intensity: float = Field(..., ge=0.0, le=1.0)
    score: float = Field(..., ge=0.0, le=25.0)

    model_config = {"frozen": True}


class TimeFactor(BaseModel):
    factor: float = Field(..., ge=0.0, le=1.0)
    score: float = Field(..., ge=0.0, le=20.0)

    model_config = {"frozen": True}


class LocationFactor(BaseModel):
    factor: float = Field(..., ge=0.0, le=1.0)
    score: float = Field(..., ge=0.0, le=20.0)

    model_config = {"frozen": True}


class RiskSnapshot(BaseModel):
    """Immutable fused risk observation."""

    audio: AudioFactor
    motion: MotionFactor
    time: TimeFactor
    location: LocationFactor
    total: float = Field(..., ge=0.0, le=100.0)
    level: RiskLevel

    model_config = {"frozen": True}

    def factor_breakdown(self) -> dict[str, float]:
        """Per-factor scores in the shape the alert backend stores."""
        return {
            "audio": self.audio.score,
            "motion": self.motion.score,
            "time": self.time.score,
            "location": self.location.score,
        }
