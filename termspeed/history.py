"""Rolling window of download samples feeding the history chart."""

from collections import deque
from typing import List

HISTORY_CAPACITY = 60
CHART_SAMPLES = 50


class HistoryBuffer:
    def __init__(self, capacity: int = HISTORY_CAPACITY, samples=()):
        self.capacity = capacity
        # Use fixed-size deque so the oldest sample falls off on overflow
        self._samples = deque(samples, maxlen=capacity)

    def push(self, sample: float):
        self._samples.append(float(sample))

    def snapshot(self, limit: int = CHART_SAMPLES) -> List[float]:
        """The last `limit` samples, oldest first"""
        if limit <= 0:
            return []
        return list(self._samples)[-limit:]

    def copy(self):
        return HistoryBuffer(self.capacity, self._samples)

    def clear(self):
        self._samples.clear()

    def __len__(self):
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def __eq__(self, other):
        if not isinstance(other, HistoryBuffer):
            return NotImplemented
        return self.capacity == other.capacity and list(self) == list(other)

    def __repr__(self):
        return f"HistoryBuffer(capacity={self.capacity}, samples={list(self._samples)!r})"
