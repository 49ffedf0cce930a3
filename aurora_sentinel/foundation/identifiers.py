"""ID generation for armings and other engine objects."""

from __future__ import annotations

from uuid import uuid4, UUID


def new_id() -> UUID:
    """Generate a new random UUID v4."""
    return uuid4()
