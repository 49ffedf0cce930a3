"""Geo-zone domain models.

A RiskZone is immutable once loaded.  A LocationContext is derived, not
authoritative: it is recomputed whenever the device position or the
zone set changes.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from aurora_sentinel.domain.enums import ZoneKind

# (lng, lat), GeoJSON axis order
Coordinate = tuple[float, float]


class GeoPoint(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)

    model_config = {"frozen": True}


class RiskZone(BaseModel):
    """An administrator-defined polygon with a risk classification."""

    id: str = Field(..., min_length=1)
    name: str = ""
    kind: ZoneKind
    polygon: list[Coordinate] = Field(..., description="Outer ring as (lng, lat) pairs")

    model_config = {"frozen": True}

    @field_validator("polygon", mode="before")
    @classmethod
    def coerce_pairs(cls, v):
        # GeoJSON rings may carry altitude as a third ordinate
        return [tuple(p[:2]) for p in v]

    def ref(self) -> "ZoneRef":
        return ZoneRef(id=self.id, name=self.name, kind=self.kind)


class ZoneRef(BaseModel):
    """The identifying subset of a RiskZone carried in a LocationContext."""

    id: str
    name: str
    kind: ZoneKind

    model_config = {"frozen": True}


class LocationContext(BaseModel):
    """Where the device is, and which zone (if any) contains it."""

    lat: float
    lng: float
    matched_zone: Optional[ZoneRef] = None
    is_normal_zone: bool = True

    model_config = {"frozen": True}
