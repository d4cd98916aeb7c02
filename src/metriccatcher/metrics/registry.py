from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional

from metriccatcher.common.lru import LRUCache
from metriccatcher.metrics.kinds import Metric, Snapshot, create_metric
from metriccatcher.metrics.types import Clock, MetricKind, default_clock

if TYPE_CHECKING:
    from metriccatcher.ingest.decoder import MetricUpdate

DEFAULT_MAX_METRICS = 500

logger = logging.getLogger("metriccatcher.registry")


@dataclass(frozen=True)
class MetricName:
    group: str
    category: str
    short_name: str

    @staticmethod
    def from_dotted(name: str) -> "MetricName":
        parts = name.split(".")
        if len(parts) >= 3:
            return MetricName(group=parts[0], category=parts[1], short_name=".".join(parts[2:]))
        return MetricName(group=name, category="", short_name="")


@dataclass(frozen=True)
class MetricSnapshot:
    name: str
    group: str
    category: str
    short_name: str
    kind: MetricKind
    values: Snapshot


@dataclass
class _Entry:
    metric_name: MetricName
    metric: Metric


class MetricRegistry:
    """Bounded name -> metric map with lazy creation and LRU eviction.

    Mutated by the ingestion loop only; ``export`` may be called from
    reporter threads at any time.
    """

    def __init__(self, max_metrics: int = DEFAULT_MAX_METRICS, clock: Clock = default_clock) -> None:
        self.max_metrics = max_metrics
        self._clock = clock
        self._entries: LRUCache[str, _Entry] = LRUCache(max_metrics)
        self._create_lock = threading.Lock()
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def get(self, name: str) -> Optional[Metric]:
        entry = self._entries.peek(name)
        return entry.metric if entry is not None else None

    def metric_name(self, name: str) -> Optional[MetricName]:
        entry = self._entries.peek(name)
        return entry.metric_name if entry is not None else None

    def get_or_create(self, name: str, kind: object, biased: bool = False) -> Optional[Metric]:
        entry = self._entries.get(name)
        if entry is not None:
            return entry.metric
        with self._create_lock:
            entry = self._entries.get(name)
            if entry is not None:
                return entry.metric
            metric = create_metric(kind, biased=biased, clock=self._clock)
            if metric is None:
                logger.warning("metric_kind_unknown", extra={"metric": name, "kind": str(kind)})
                return None
            logger.info(
                "metric_created",
                extra={"metric": name, "kind": metric.kind.value, "biased": biased},
            )
            evicted = self._entries.put(name, _Entry(MetricName.from_dotted(name), metric))
            for evicted_name, _ in evicted:
                self.evictions += 1
                logger.debug("metric_evicted", extra={"metric": evicted_name})
            return metric

    def update(self, name: str, kind: object, value: float, biased: bool = False) -> bool:
        metric = self.get_or_create(name, kind, biased=biased)
        if metric is None:
            return False
        logger.debug("metric_update", extra={"metric": name, "value": value})
        metric.update(value)
        return True

    def apply(self, updates: Iterable[MetricUpdate]) -> int:
        applied = 0
        for update in updates:
            if self.update(update.name, update.kind, update.value, biased=update.biased):
                applied += 1
        return applied

    def export(self) -> List[MetricSnapshot]:
        snapshots: List[MetricSnapshot] = []
        for name, entry in self._entries.items():
            metric_name = entry.metric_name
            snapshots.append(
                MetricSnapshot(
                    name=name,
                    group=metric_name.group,
                    category=metric_name.category,
                    short_name=metric_name.short_name,
                    kind=entry.metric.kind,
                    values=entry.metric.snapshot(),
                )
            )
        return snapshots


__all__ = ["DEFAULT_MAX_METRICS", "MetricName", "MetricRegistry", "MetricSnapshot"]
