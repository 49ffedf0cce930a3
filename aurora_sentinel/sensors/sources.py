"""Platform sources the samplers read from.

A sampler never talks to hardware directly.  It is handed a source that
satisfies one of the protocols below.  In the hosted service the device
pushes its readings over ``/ws/sensor`` into the ``Pushed*`` sources; in
tests, fakes implement the same protocols.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from pydantic import BaseModel, Field


# ── Wire models ─────────────────────────────────────────────────────────────

class Vector3(BaseModel):
    """One accelerometer reading.  Missing axes read as 0."""

    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None

    model_config = {"frozen": True, "allow_inf_nan": False}


class MotionEvent(BaseModel):
    """A device-motion event as delivered by the platform."""

    acceleration: Optional[Vector3] = None
    acceleration_including_gravity: Optional[Vector3] = None

    model_config = {"frozen": True}

    def vector(self) -> Optional[Vector3]:
        return self.acceleration or self.acceleration_including_gravity


class SpectrumFrame(BaseModel):
    """Byte-scaled magnitude spectrum (0-255 per bin) of one audio window."""

    bins: list[int] = Field(..., min_length=1, max_length=32768)
    sample_rate: float = Field(48000.0, gt=0.0)

    model_config = {"frozen": True}


# ── Protocols ───────────────────────────────────────────────────────────────

class AudioSource(Protocol):
    """An open-able microphone analyser."""

    async def open(self) -> None:
        """Acquire the stream.  Raise PermissionError/OSError on denial."""
        ...

    def read_spectrum(self) -> Optional[Sequence[int]]:
        """Latest byte spectrum, or None when nothing has arrived yet."""
        ...

    @property
    def sample_rate(self) -> float:
        ...

    def close(self) -> None:
        ...


class MotionProvider(Protocol):
    """Platform motion-event delivery."""

    def is_supported(self) -> bool:
        ...

    async def request_permission(self) -> bool:
        ...


# ── Push-fed implementations ────────────────────────────────────────────────

class PushedSpectrumSource:
    """Holds the most recent spectrum frame pushed by the device."""

    def __init__(self) -> None:
        self._frame: Optional[SpectrumFrame] = None
        self._open = False

    async def open(self) -> None:
        self._open = True

    def push(self, frame: SpectrumFrame) -> None:
        if self._open:
            self._frame = frame

    def read_spectrum(self) -> Optional[Sequence[int]]:
        return self._frame.bins if self._frame else None

    @property
    def sample_rate(self) -> float:
        return self._frame.sample_rate if self._frame else 48000.0

    def close(self) -> None:
        self._open = False
        self._frame = None


class PushedMotionProvider:
    """Motion delivery over the device WebSocket; permission is the device's concern."""

    def is_supported(self) -> bool:
        return True

    async def request_permission(self) -> bool:
        return True
