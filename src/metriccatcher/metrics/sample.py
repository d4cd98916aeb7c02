"""
Reservoir samples backing histograms.

UniformSample keeps an equally weighted random subset of every value seen
(Vitter's Algorithm R). ExponentiallyDecayingSample biases the reservoir
toward recent values using forward decay (Cormode et al., 2009), so the
distribution reflects roughly the last five minutes of updates.
"""

from __future__ import annotations

import heapq
import math
import random
from typing import List, Optional, Tuple

from metriccatcher.metrics.types import Clock, default_clock

DEFAULT_SAMPLE_SIZE = 1028
DEFAULT_DECAY_ALPHA = 0.015
RESCALE_THRESHOLD_SEC = 60.0 * 60.0


class UniformSample:
    biased = False

    def __init__(self, size: int = DEFAULT_SAMPLE_SIZE, rng: Optional[random.Random] = None) -> None:
        self.size = size
        self._rng = rng or random.Random()
        self._count = 0
        self._values: List[int] = []

    def __len__(self) -> int:
        return min(self._count, self.size)

    def update(self, value: int) -> None:
        self._count += 1
        if self._count <= self.size:
            self._values.append(value)
            return
        r = self._rng.randrange(self._count)
        if r < self.size:
            self._values[r] = value

    def values(self) -> List[int]:
        return sorted(self._values)

    def clear(self) -> None:
        self._count = 0
        self._values = []


class ExponentiallyDecayingSample:
    biased = True

    def __init__(
        self,
        size: int = DEFAULT_SAMPLE_SIZE,
        alpha: float = DEFAULT_DECAY_ALPHA,
        clock: Clock = default_clock,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.size = size
        self.alpha = alpha
        self._clock = clock
        self._rng = rng or random.Random()
        # min-heap of (priority, value); the root is the first candidate to drop
        self._heap: List[Tuple[float, int]] = []
        self._start_time = self._clock()
        self._next_scale_time = self._start_time + RESCALE_THRESHOLD_SEC

    def __len__(self) -> int:
        return len(self._heap)

    def _weight(self, elapsed: float) -> float:
        return math.exp(self.alpha * elapsed)

    def update(self, value: int, timestamp: Optional[float] = None) -> None:
        now = self._clock() if timestamp is None else timestamp
        self._rescale_if_needed(now)
        # random() may return 0.0; flip it into (0, 1]
        priority = self._weight(now - self._start_time) / (1.0 - self._rng.random())
        if len(self._heap) < self.size:
            heapq.heappush(self._heap, (priority, value))
        elif self._heap[0][0] < priority:
            heapq.heapreplace(self._heap, (priority, value))

    def _rescale_if_needed(self, now: float) -> None:
        if now < self._next_scale_time:
            return
        old_start = self._start_time
        self._start_time = now
        self._next_scale_time = now + RESCALE_THRESHOLD_SEC
        factor = math.exp(-self.alpha * (self._start_time - old_start))
        self._heap = [(priority * factor, value) for priority, value in self._heap]
        heapq.heapify(self._heap)

    def values(self) -> List[int]:
        return sorted(value for _, value in self._heap)

    def clear(self) -> None:
        self._heap = []
        self._start_time = self._clock()
        self._next_scale_time = self._start_time + RESCALE_THRESHOLD_SEC


def quantile(sorted_values: List[int], q: float) -> float:
    if not sorted_values:
        return 0.0
    n = len(sorted_values)
    pos = q * (n + 1)
    if pos < 1:
        return float(sorted_values[0])
    if pos >= n:
        return float(sorted_values[-1])
    lower = sorted_values[int(pos) - 1]
    upper = sorted_values[int(pos)]
    return lower + (pos - math.floor(pos)) * (upper - lower)


__all__ = [
    "DEFAULT_SAMPLE_SIZE",
    "ExponentiallyDecayingSample",
    "UniformSample",
    "quantile",
]
