"""Fixed-capacity rolling histories used by the beat detector."""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterable, Iterator, TypeVar

import numpy as np

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Fixed-capacity FIFO; appending to a full buffer drops the oldest entry."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._items: deque[T] = deque(maxlen=capacity)

    def append(self, item: T) -> None:
        self._items.append(item)

    def extend(self, items: Iterable[T]) -> None:
        self._items.extend(items)

    def clear(self) -> None:
        self._items.clear()

    def to_list(self) -> list[T]:
        return list(self._items)

    def to_array(self) -> np.ndarray:
        return np.asarray(self._items, dtype=np.float64)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]


class RRIntervalSeries:
    """Rolling window of physiologically plausible RR intervals (ms).

    Intervals outside ``[min_ms, max_ms]`` are rejected on entry, so the
    series never holds an implausible value.
    """

    def __init__(self, capacity: int = 50, min_ms: float = 300.0, max_ms: float = 2000.0) -> None:
        self.min_ms = min_ms
        self.max_ms = max_ms
        self._buffer: RingBuffer[float] = RingBuffer(capacity)

    def extend(self, intervals_ms: Iterable[float]) -> int:
        """Add intervals, returning how many passed the plausibility filter."""
        accepted = 0
        for rr in intervals_ms:
            if self.min_ms <= rr <= self.max_ms:
                self._buffer.append(float(rr))
                accepted += 1
        return accepted

    def clear(self) -> None:
        self._buffer.clear()

    @property
    def values(self) -> np.ndarray:
        return self._buffer.to_array()

    def mean(self) -> float:
        return float(np.mean(self.values)) if len(self) else 0.0

    def std(self) -> float:
        """Population standard deviation."""
        return float(np.std(self.values)) if len(self) else 0.0

    def coefficient_of_variation(self) -> float:
        mean = self.mean()
        return self.std() / mean if mean > 0 else 0.0

    def heart_rate(self) -> float:
        mean = self.mean()
        return 60000.0 / mean if mean > 0 else 0.0

    def __len__(self) -> int:
        return len(self._buffer)
