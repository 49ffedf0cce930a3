"""MotionSampler — turns device-motion events into MotionFeatures.

Event-driven rather than polled: each platform event yields a fresh
feature vector, which the engine keeps as "latest motion" until the next
event arrives.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from aurora_sentinel.domain.enums import SensorKind
from aurora_sentinel.domain.errors import SensorUnavailable
from aurora_sentinel.domain.features import MotionFeatures
from aurora_sentinel.sensors.buffers import RingBuffer
from aurora_sentinel.sensors.sources import MotionEvent, MotionProvider

logger = logging.getLogger(__name__)


class MotionSampler:
    """Event-driven motion feature extractor.

    Args:
        provider: Platform motion delivery (support + permission checks).
        jitter_window: How many recent magnitudes feed the jitter mean.
    """

    def __init__(self, provider: MotionProvider, jitter_window: int = 20) -> None:
        self._provider = provider
        self._magnitudes = RingBuffer(jitter_window)
        self._last: Optional[tuple[float, float, float]] = None
        self._active = False

    async def initialize(self) -> None:
        """Check platform support and request permission.

        Raises:
            SensorUnavailable: If motion is unsupported or permission is denied.
        """
        if not self._provider.is_supported():
            raise SensorUnavailable(SensorKind.MOTION.value, "device motion not supported")
        if not await self._provider.request_permission():
            raise SensorUnavailable(SensorKind.MOTION.value, "permission denied")
        self._active = True
        logger.info("Motion sampler started")

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._last = None
        self._magnitudes.clear()
        logger.info("Motion sampler stopped")

    @property
    def active(self) -> bool:
        return self._active

    def on_raw_event(self, event: MotionEvent) -> MotionFeatures:
        """Fold one platform event into the rolling state; never raises."""
        vec = event.vector()
        if not self._active or vec is None:
            return MotionFeatures.zero()

        x, y, z = vec.x or 0.0, vec.y or 0.0, vec.z or 0.0
        magnitude = math.sqrt(x * x + y * y + z * z)

        if not math.isfinite(magnitude):
            logger.debug("Dropping non-finite motion event")
            return MotionFeatures.zero()

        self._magnitudes.push(magnitude)
        jitter = _mean_abs_diff(self._magnitudes.values())

        shake = 0.0
        if self._last is not None:
            lx, ly, lz = self._last
            shake = (abs(x - lx) + abs(y - ly) + abs(z - lz)) / 3
        self._last = (x, y, z)

        intensity = min((magnitude / 30) * 0.6 + (jitter / 20) * 0.4, 1.0)

        return MotionFeatures(
            acceleration_magnitude=magnitude,
            jitter=jitter,
            shake=shake,
            intensity=intensity,
        )


def _mean_abs_diff(values: list[float]) -> float:
    if len(values) < 2:
        return 0.0
    total = sum(abs(values[i] - values[i - 1]) for i in range(1, len(values)))
    return total / (len(values) - 1)
