from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional

Clock = Callable[[], float]


def default_clock() -> float:
    return time.monotonic()


def truncate(value: float) -> int:
    """Drop the fractional part, rounding toward zero."""
    return int(value)


class MetricKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    METER = "meter"
    HISTOGRAM = "histogram"
    TIMER = "timer"

    @classmethod
    def parse(cls, raw: object) -> Optional["MetricKind"]:
        if isinstance(raw, MetricKind):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class TimeUnit(Enum):
    NANOSECONDS = 1e-9
    MICROSECONDS = 1e-6
    MILLISECONDS = 1e-3
    SECONDS = 1.0
    MINUTES = 60.0
    HOURS = 3600.0

    @property
    def seconds(self) -> float:
        return float(self.value)

    def convert(self, amount: float, target: "TimeUnit") -> float:
        if self is target:
            return float(amount)
        return amount * (self.seconds / target.seconds)


__all__ = ["Clock", "MetricKind", "TimeUnit", "default_clock", "truncate"]
