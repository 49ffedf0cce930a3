"""Fixed-capacity ring buffer used by the samplers for rolling windows."""

from __future__ import annotations

from collections import deque
from typing import Iterator


class RingBuffer:
    """Keeps the most recent *capacity* floats; older values fall off."""

    __slots__ = ("_items",)

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._items: deque[float] = deque(maxlen=capacity)

    def push(self, value: float) -> None:
        self._items.append(value)

    def clear(self) -> None:
        self._items.clear()

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[float]:
        return iter(self._items)

    def values(self) -> list[float]:
        return list(self._items)
