"""Explanation domain models — a readable projection of a RiskSnapshot.

These models are never fed back into the engine.  Every bullet is
derived from a field of the snapshot or its input features.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from aurora_sentinel.domain.enums import RiskLevel


class FactorName(str, Enum):
    AUDIO = "audio"
    MOTION = "motion"
    TIME = "time"
    LOCATION = "location"


class FactorSection(BaseModel):
    """One factor's contribution and the readings behind it."""

    factor: FactorName
    title: str
    bullet_points: list[str] = Field(default_factory=list)
    score: float
    cap: float
    share_of_total: float = Field(..., ge=0.0, le=1.0)

    model_config = {"frozen": True}


class RiskExplanation(BaseModel):
    level: RiskLevel
    total: float
    headline: str
    generated_at: datetime
    sections: list[FactorSection]
    dominant_factor: FactorName

    model_config = {"frozen": True}
