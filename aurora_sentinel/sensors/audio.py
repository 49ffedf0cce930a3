"""AudioSampler — turns microphone spectrum frames into AudioFeatures.

Per tick (~200 ms):
    rms            = sqrt(mean((bin / 255)^2))
    rms_adjusted   = min(rms * gain, 1)  when heightened, else rms
    spike_count   += 1 if rms_adjusted > threshold else -1 (floored at 0)
    pitch_hz       = argmax(bins) * sample_rate / (2 * len(bins))
    pitch_variance = min(var(last N pitches) / 10_000, 1)
    stress         = rms_adjusted*0.5 + pitch_variance*0.3 + min(spikes/5, 1)*0.2

Heightened sensitivity is a runtime flag: flipping it changes the gain
and threshold used on the next tick without rebuilding the sampler.
"""

from __future__ import annotations

import logging

import numpy as np

from aurora_sentinel.domain.enums import SensorKind
from aurora_sentinel.domain.errors import SensorUnavailable
from aurora_sentinel.domain.features import AudioFeatures
from aurora_sentinel.sensors.buffers import RingBuffer
from aurora_sentinel.sensors.sources import AudioSource

logger = logging.getLogger(__name__)

_PITCH_VARIANCE_SCALE = 10_000.0
_SPIKE_SATURATION = 5.0


class AudioSampler:
    """Polled audio feature extractor.

    Args:
        source: The microphone analyser to read spectrum frames from.
        spike_threshold: Spike threshold at normal sensitivity.
        heightened_threshold: Spike threshold at heightened sensitivity.
        heightened_gain: Loudness multiplier at heightened sensitivity.
        pitch_window: How many recent pitch readings feed the variance.
    """

    def __init__(
        self,
        source: AudioSource,
        spike_threshold: float = 0.7,
        heightened_threshold: float = 0.35,
        heightened_gain: float = 2.0,
        pitch_window: int = 50,
    ) -> None:
        self._source = source
        self._spike_threshold = spike_threshold
        self._heightened_threshold = heightened_threshold
        self._heightened_gain = heightened_gain
        self._pitches = RingBuffer(pitch_window)
        self._spike_count = 0
        self._heightened = False
        self._active = False

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Open the microphone stream.

        Raises:
            SensorUnavailable: If the platform denies or lacks a microphone.
        """
        try:
            await self._source.open()
        except (PermissionError, OSError) as exc:
            raise SensorUnavailable(SensorKind.AUDIO.value, str(exc) or type(exc).__name__) from exc
        self._active = True
        logger.info("Audio sampler started")

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._source.close()
        self._pitches.clear()
        self._spike_count = 0
        logger.info("Audio sampler stopped")

    @property
    def active(self) -> bool:
        return self._active

    # ── Sensitivity ──────────────────────────────────────────────────────

    def set_heightened_sensitivity(self, enabled: bool) -> None:
        self._heightened = enabled

    @property
    def heightened(self) -> bool:
        return self._heightened

    @property
    def spike_threshold(self) -> float:
        return self._heightened_threshold if self._heightened else self._spike_threshold

    # ── Sampling ─────────────────────────────────────────────────────────

    def sample(self) -> AudioFeatures:
        """Read the current spectrum frame and return its features.

        Never raises.  Returns zero-features while inactive; a missing
        frame counts as silence so the spike counter keeps leaking.
        """
        if not self._active:
            return AudioFeatures.zero()

        bins = self._source.read_spectrum()
        if not bins:
            self._spike_count = max(0, self._spike_count - 1)
            return AudioFeatures.zero()

        spectrum = np.asarray(bins, dtype=np.float64)
        normalized = np.clip(spectrum, 0.0, 255.0) / 255.0
        rms = float(np.sqrt(np.mean(normalized * normalized)))
        if self._heightened:
            rms = min(rms * self._heightened_gain, 1.0)

        if rms > self.spike_threshold:
            self._spike_count += 1
        else:
            self._spike_count = max(0, self._spike_count - 1)

        pitch = float(np.argmax(spectrum)) * self._source.sample_rate / (2 * len(spectrum))
        self._pitches.push(pitch)
        pitch_variance = min(float(np.var(self._pitches.values())) / _PITCH_VARIANCE_SCALE, 1.0)

        stress = (
            rms * 0.5
            + pitch_variance * 0.3
            + min(self._spike_count / _SPIKE_SATURATION, 1.0) * 0.2
        )

        return AudioFeatures(
            rms=rms,
            pitch_hz=pitch,
            pitch_variance=pitch_variance,
            spike_count=self._spike_count,
            stress=min(stress, 1.0),
        )
