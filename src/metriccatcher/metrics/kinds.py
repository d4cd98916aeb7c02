from __future__ import annotations

import math
import threading
from typing import Dict, Optional, Union

from metriccatcher.metrics.ewma import EWMA, TICK_INTERVAL_SEC
from metriccatcher.metrics.sample import (
    ExponentiallyDecayingSample,
    UniformSample,
    quantile,
)
from metriccatcher.metrics.types import Clock, MetricKind, TimeUnit, default_clock, truncate

Snapshot = Dict[str, float]


class Gauge:
    kind = MetricKind.GAUGE

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value

    def update(self, value: float) -> None:
        self.set(truncate(value))

    def snapshot(self) -> Snapshot:
        with self._lock:
            return {"value": self._value}


class Counter:
    kind = MetricKind.COUNTER

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def clear(self) -> None:
        with self._lock:
            self._count = 0

    def update(self, value: float) -> None:
        # Zero clears the counter rather than adding nothing.
        if value > 0:
            self.inc(truncate(value))
        elif value < 0:
            self.dec(truncate(abs(value)))
        else:
            self.clear()

    def snapshot(self) -> Snapshot:
        with self._lock:
            return {"count": self._count}


class Meter:
    kind = MetricKind.METER

    def __init__(self, rate_unit: TimeUnit = TimeUnit.SECONDS, clock: Clock = default_clock) -> None:
        self.rate_unit = rate_unit
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._m1 = EWMA.one_minute()
        self._m5 = EWMA.five_minute()
        self._m15 = EWMA.fifteen_minute()
        self._start_time = clock()
        self._last_tick = self._start_time

    @property
    def count(self) -> int:
        return self._count

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    def update(self, value: float) -> None:
        self.mark(truncate(value))

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        age = now - self._last_tick
        if age <= TICK_INTERVAL_SEC:
            return
        self._last_tick = now - math.fmod(age, TICK_INTERVAL_SEC)
        for _ in range(int(age // TICK_INTERVAL_SEC)):
            self._m1.tick()
            self._m5.tick()
            self._m15.tick()

    def _scaled(self, per_second: float) -> float:
        return per_second * self.rate_unit.seconds

    def _mean_rate_locked(self) -> float:
        if self._count == 0:
            return 0.0
        elapsed = self._clock() - self._start_time
        if elapsed <= 0:
            return 0.0
        return self._scaled(self._count / elapsed)

    def one_minute_rate(self) -> float:
        with self._lock:
            self._tick_if_necessary()
            return self._scaled(self._m1.rate_per_second())

    def five_minute_rate(self) -> float:
        with self._lock:
            self._tick_if_necessary()
            return self._scaled(self._m5.rate_per_second())

    def fifteen_minute_rate(self) -> float:
        with self._lock:
            self._tick_if_necessary()
            return self._scaled(self._m15.rate_per_second())

    def mean_rate(self) -> float:
        with self._lock:
            return self._mean_rate_locked()

    def snapshot(self) -> Snapshot:
        with self._lock:
            self._tick_if_necessary()
            return {
                "count": self._count,
                "mean_rate": self._mean_rate_locked(),
                "m1_rate": self._scaled(self._m1.rate_per_second()),
                "m5_rate": self._scaled(self._m5.rate_per_second()),
                "m15_rate": self._scaled(self._m15.rate_per_second()),
            }


class Histogram:
    """Distribution of integer samples.

    ``biased`` selects the exponentially decaying reservoir; otherwise every
    value has equal weight. The choice is fixed for the life of the metric.
    """

    kind = MetricKind.HISTOGRAM

    def __init__(self, biased: bool = False, clock: Clock = default_clock) -> None:
        self._lock = threading.Lock()
        self._sample: Union[UniformSample, ExponentiallyDecayingSample]
        if biased:
            self._sample = ExponentiallyDecayingSample(clock=clock)
        else:
            self._sample = UniformSample()
        self._count = 0
        self._min: Optional[int] = None
        self._max: Optional[int] = None
        self._sum = 0
        # Welford running mean / sum of squared deltas
        self._mean = 0.0
        self._m2 = 0.0

    @property
    def biased(self) -> bool:
        return self._sample.biased

    @property
    def count(self) -> int:
        return self._count

    def update(self, value: float) -> None:
        sample = truncate(value)
        with self._lock:
            self._sample.update(sample)
            self._count += 1
            self._sum += sample
            if self._min is None or sample < self._min:
                self._min = sample
            if self._max is None or sample > self._max:
                self._max = sample
            delta = sample - self._mean
            self._mean += delta / self._count
            self._m2 += delta * (sample - self._mean)

    def snapshot(self) -> Snapshot:
        with self._lock:
            values = self._sample.values()
            count = self._count
            stddev = math.sqrt(self._m2 / (count - 1)) if count > 1 else 0.0
            return {
                "count": count,
                "min": float(self._min) if self._min is not None else 0.0,
                "max": float(self._max) if self._max is not None else 0.0,
                "mean": self._sum / count if count else 0.0,
                "stddev": stddev,
                "median": quantile(values, 0.5),
                "p75": quantile(values, 0.75),
                "p95": quantile(values, 0.95),
                "p98": quantile(values, 0.98),
                "p99": quantile(values, 0.99),
                "p999": quantile(values, 0.999),
            }


_DURATION_FIELDS = ("min", "max", "mean", "stddev", "median", "p75", "p95", "p98", "p99", "p999")


class Timer:
    """Histogram of durations recorded in microseconds plus a call-rate meter."""

    kind = MetricKind.TIMER

    def __init__(
        self,
        biased: bool = False,
        duration_unit: TimeUnit = TimeUnit.MICROSECONDS,
        rate_unit: TimeUnit = TimeUnit.SECONDS,
        clock: Clock = default_clock,
    ) -> None:
        self.duration_unit = duration_unit
        self.histogram = Histogram(biased=biased, clock=clock)
        self.meter = Meter(rate_unit=rate_unit, clock=clock)

    @property
    def biased(self) -> bool:
        return self.histogram.biased

    @property
    def count(self) -> int:
        return self.histogram.count

    def update(self, value: float) -> None:
        self.histogram.update(value)
        self.meter.mark()

    def snapshot(self) -> Snapshot:
        durations = self.histogram.snapshot()
        for key in _DURATION_FIELDS:
            durations[key] = TimeUnit.MICROSECONDS.convert(durations[key], self.duration_unit)
        rates = self.meter.snapshot()
        rates.pop("count")
        return {**durations, **rates}


Metric = Union[Gauge, Counter, Meter, Histogram, Timer]


def create_metric(kind: object, biased: bool = False, clock: Clock = default_clock) -> Optional[Metric]:
    parsed = MetricKind.parse(kind)
    if parsed is MetricKind.GAUGE:
        return Gauge()
    if parsed is MetricKind.COUNTER:
        return Counter()
    if parsed is MetricKind.METER:
        return Meter(rate_unit=TimeUnit.MINUTES, clock=clock)
    if parsed is MetricKind.HISTOGRAM:
        return Histogram(biased=biased, clock=clock)
    if parsed is MetricKind.TIMER:
        return Timer(biased=biased, clock=clock)
    return None


__all__ = [
    "Counter",
    "Gauge",
    "Histogram",
    "Meter",
    "Metric",
    "Snapshot",
    "Timer",
    "create_metric",
]
