"""Zone matching — which risk zone, if any, contains a point.

Uses even-odd ray casting against each zone's outer ring.  When several
zones contain the point, the first HIGH zone in load order wins, else
the first LOW one.  Overlaps are not resolved by area or centroid
distance.

Rings with fewer than three vertices are skipped at match time.
Self-intersection is expensive to detect, so ``validate_ring`` is run
once when zones are loaded (see ZoneCache) rather than on every match.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from aurora_sentinel.domain.enums import ZoneKind
from aurora_sentinel.domain.errors import InvalidZoneGeometry
from aurora_sentinel.domain.zone import Coordinate, GeoPoint, RiskZone


def open_ring(ring: Sequence[Coordinate]) -> list[Coordinate]:
    """Drop the GeoJSON closing vertex if the ring repeats its first point."""
    points = list(ring)
    if len(points) > 1 and points[0] == points[-1]:
        points.pop()
    return points


def point_in_ring(point: GeoPoint, ring: Sequence[Coordinate]) -> bool:
    """Even-odd ray-casting test; x is longitude, y is latitude."""
    x, y = point.lng, point.lat
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def match_zone(point: GeoPoint, zones: Iterable[RiskZone]) -> Optional[RiskZone]:
    """Return the zone containing *point*, preferring HIGH over LOW."""
    first: Optional[RiskZone] = None
    for zone in zones:
        ring = zone.polygon
        if len(ring) < 3 or not point_in_ring(point, ring):
            continue
        if zone.kind == ZoneKind.HIGH:
            return zone
        if first is None:
            first = zone
    return first


# ── Geometry validation ─────────────────────────────────────────────────────

def validate_ring(zone_id: str, ring: Sequence[Coordinate]) -> None:
    """Raise InvalidZoneGeometry for degenerate or self-intersecting rings."""
    points = open_ring(ring)
    if len(set(points)) < 3:
        raise InvalidZoneGeometry(zone_id, f"ring has {len(set(points))} distinct vertices, need 3")
    if _signed_area(points) == 0.0:
        raise InvalidZoneGeometry(zone_id, "ring has zero area")

    n = len(points)
    edges = [(points[i], points[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        for k in range(i + 1, n):
            # Neighbouring edges share a vertex by construction
            if k == i + 1 or (i == 0 and k == n - 1):
                continue
            if _segments_cross(*edges[i], *edges[k]):
                raise InvalidZoneGeometry(zone_id, f"edges {i} and {k} intersect")


def _signed_area(points: Sequence[Coordinate]) -> float:
    n = len(points)
    return 0.5 * sum(
        points[i][0] * points[(i + 1) % n][1] - points[(i + 1) % n][0] * points[i][1]
        for i in range(n)
    )


def _orientation(a: Coordinate, b: Coordinate, c: Coordinate) -> float:
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def _on_segment(a: Coordinate, b: Coordinate, p: Coordinate) -> bool:
    return (
        min(a[0], b[0]) <= p[0] <= max(a[0], b[0])
        and min(a[1], b[1]) <= p[1] <= max(a[1], b[1])
    )


def _segments_cross(p1: Coordinate, p2: Coordinate, q1: Coordinate, q2: Coordinate) -> bool:
    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)

    if ((d1 > 0) != (d2 > 0)) and d1 != 0 and d2 != 0 \
            and ((d3 > 0) != (d4 > 0)) and d3 != 0 and d4 != 0:
        return True

    # Collinear touching also counts for non-adjacent edges
    if d1 == 0 and _on_segment(q1, q2, p1):
        return True
    if d2 == 0 and _on_segment(q1, q2, p2):
        return True
    if d3 == 0 and _on_segment(p1, p2, q1):
        return True
    if d4 == 0 and _on_segment(p1, p2, q2):
        return True
    return False
