"""Engine error kinds.

Sampler errors surface once, at initialization.  Submission errors are
recoverable and never leave the engine armed.  Geometry errors are
logged and the offending zone is skipped.
"""

from __future__ import annotations


class SentinelError(Exception):
    """Base class for engine errors."""


class SensorUnavailable(SentinelError):
    """A sampler could not be initialized (permission denied or unsupported)."""

    def __init__(self, sensor: str, reason: str) -> None:
        self.sensor = sensor
        self.reason = reason
        super().__init__(f"{sensor} sensor unavailable: {reason}")


class SubmissionFailed(SentinelError):
    """The transport could not deliver a fired alert."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Alert submission failed: {reason}")


class InvalidZoneGeometry(SentinelError):
    """A zone polygon is degenerate or self-intersecting."""

    def __init__(self, zone_id: str, reason: str) -> None:
        self.zone_id = zone_id
        self.reason = reason
        super().__init__(f"Zone '{zone_id}' has invalid geometry: {reason}")


class ArmingRejected(SentinelError):
    """arm() was called while an arming is already in progress."""
