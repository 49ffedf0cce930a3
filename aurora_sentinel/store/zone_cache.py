"""In-memory cache of the session's risk zones.

Design notes:
    - The zone set is read-only after load.  ``replace()`` builds a new
      tuple and swaps it in with a single assignment, so a reader either
      sees the whole old set or the whole new one.
    - Zones with invalid geometry are skipped and logged, never fatal.
    - The cache does not know where the device is; it answers
      ``locate(point)`` for whoever asks.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from aurora_sentinel.core.zones import match_zone, validate_ring
from aurora_sentinel.domain.errors import InvalidZoneGeometry
from aurora_sentinel.domain.zone import GeoPoint, LocationContext, RiskZone

logger = logging.getLogger(__name__)


class ZoneCache:
    """Holds the currently loaded, validated zone set."""

    def __init__(self, zones: Iterable[RiskZone] = ()) -> None:
        self._zones: tuple[RiskZone, ...] = ()
        self._skipped: tuple[str, ...] = ()
        if zones:
            self.replace(zones)

    def replace(self, zones: Iterable[RiskZone]) -> int:
        """Validate *zones* and swap them in.  Returns the number kept."""
        kept: list[RiskZone] = []
        skipped: list[str] = []
        for zone in zones:
            try:
                validate_ring(zone.id, zone.polygon)
            except InvalidZoneGeometry as exc:
                logger.warning("Skipping zone: %s", exc)
                skipped.append(zone.id)
                continue
            kept.append(zone)

        self._zones = tuple(kept)
        self._skipped = tuple(skipped)
        logger.info("Loaded %d risk zone(s), skipped %d", len(kept), len(skipped))
        return len(kept)

    @property
    def zones(self) -> tuple[RiskZone, ...]:
        return self._zones

    @property
    def skipped(self) -> tuple[str, ...]:
        return self._skipped

    def __len__(self) -> int:
        return len(self._zones)

    def match(self, point: GeoPoint) -> Optional[RiskZone]:
        return match_zone(point, self._zones)

    def locate(self, point: GeoPoint) -> LocationContext:
        """Derive the LocationContext for *point* against the current set."""
        zone = self.match(point)
        return LocationContext(
            lat=point.lat,
            lng=point.lng,
            matched_zone=zone.ref() if zone else None,
            is_normal_zone=zone is None,
        )
