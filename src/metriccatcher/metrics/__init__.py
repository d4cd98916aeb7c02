from metriccatcher.metrics.kinds import (
    Counter,
    Gauge,
    Histogram,
    Meter,
    Metric,
    Timer,
    create_metric,
)
from metriccatcher.metrics.registry import MetricName, MetricRegistry, MetricSnapshot
from metriccatcher.metrics.types import MetricKind, TimeUnit, truncate

__all__ = [
    "Counter",
    "Gauge",
    "Histogram",
    "Meter",
    "Metric",
    "MetricKind",
    "MetricName",
    "MetricRegistry",
    "MetricSnapshot",
    "TimeUnit",
    "Timer",
    "create_metric",
    "truncate",
]
