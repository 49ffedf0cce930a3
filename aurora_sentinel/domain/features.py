"""Feature vectors emitted by the signal samplers.

Both models are ephemeral: a sampler overwrites its last value on every
tick or event.  ``zero()`` is the value returned whenever a sampler is
not initialized or was denied permission, so steady-state polling never
raises.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class AudioFeatures(BaseModel):
    """Normalized ambient-audio features for one ~200 ms sampling tick."""

    rms: float = Field(0.0, ge=0.0, le=1.0, description="Normalized loudness (after sensitivity gain)")
    pitch_hz: float = Field(0.0, ge=0.0, description="Dominant frequency of the spectrum frame")
    pitch_variance: float = Field(0.0, ge=0.0, le=1.0, description="Normalized variance of recent pitch")
    spike_count: int = Field(0, ge=0, description="Leaky counter of above-threshold ticks")
    stress: float = Field(0.0, ge=0.0, le=1.0, description="Composite audio stress indicator")

    model_config = {"frozen": True}

    @classmethod
    def zero(cls) -> "AudioFeatures":
        return cls()


class MotionFeatures(BaseModel):
    """Normalized device-motion features for one motion event."""

    acceleration_magnitude: float = Field(0.0, ge=0.0, description="Euclidean norm of the acceleration vector")
    jitter: float = Field(0.0, ge=0.0, description="Mean absolute first difference of recent magnitudes")
    shake: float = Field(0.0, ge=0.0, description="Mean absolute per-axis delta since the previous event")
    intensity: float = Field(0.0, ge=0.0, le=1.0, description="Composite motion intensity")

    model_config = {"frozen": True}

    @classmethod
    def zero(cls) -> "MotionFeatures":
        return cls()
