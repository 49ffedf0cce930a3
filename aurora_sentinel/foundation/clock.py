"""Timezone-aware clock utilities.

All engine timestamps are UTC-aware.  This module is the single source
of "now" so tests can monkey-patch it trivially.  Time-of-day scoring
needs the *local* hour, which is derived from a UTC instant plus the
configured IANA zone.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def local_hour(moment: datetime, tz_name: str = "UTC") -> int:
    """Hour of day (0-23) of *moment* in the given IANA zone.

    Naive datetimes are taken to already be local wall-clock time.
    """
    if moment.tzinfo is None:
        return moment.hour
    return moment.astimezone(ZoneInfo(tz_name)).hour
