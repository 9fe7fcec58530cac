"""Fixed-capacity sample history feeding the dashboard sparklines.

Samples live in a preallocated ring so appends never allocate.  Once the
ring is full each append overwrites the oldest sample.  Gaps in arrival are
not filled: a period without samples simply produces no appends.
"""

from __future__ import annotations

import math
import threading
from typing import Optional

import numpy as np

__all__ = ["DEFAULT_HISTORY_CAPACITY", "HistoryBuffer"]


DEFAULT_HISTORY_CAPACITY = 300


class HistoryBuffer:
    """Circular buffer of float samples ordered by arrival."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        capacity = int(capacity)
        if capacity <= 0:
            raise ValueError("HistoryBuffer requires a positive capacity")
        self._capacity = capacity
        self._samples = np.zeros(capacity, dtype=np.float64)
        self._start = 0
        self._size = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def latest(self) -> Optional[float]:
        with self._lock:
            if not self._size:
                return None
            return float(self._samples[self._logical_index(self._size - 1)])

    def append(self, value: float) -> None:
        """Append ``value``, evicting the oldest sample when full.

        Non-finite values are ignored.
        """

        number = float(value)
        if not math.isfinite(number):
            return
        with self._lock:
            if self._size == self._capacity:
                self._samples[self._start] = number
                self._start = (self._start + 1) % self._capacity
                return
            self._samples[self._logical_index(self._size)] = number
            self._size += 1

    def snapshot(self) -> list[float]:
        """Return a copy of the stored samples, oldest first."""

        with self._lock:
            ordered = np.roll(self._samples, -self._start)[: self._size]
        return ordered.tolist()

    def _logical_index(self, offset: int) -> int:
        return (self._start + offset) % self._capacity
