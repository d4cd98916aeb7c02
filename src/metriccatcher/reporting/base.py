from __future__ import annotations

import logging
import threading
import time
from typing import Iterable, List, Optional, Tuple

from metriccatcher.metrics.registry import MetricRegistry, MetricSnapshot


def metric_path(snapshot: MetricSnapshot, field_name: str, prefix: Optional[str] = None) -> str:
    parts = [prefix, snapshot.group, snapshot.category, snapshot.short_name, field_name]
    return ".".join(sanitize(part) for part in parts if part)


def sanitize(segment: str) -> str:
    return segment.replace(" ", "_")


def numeric_fields(snapshot: MetricSnapshot) -> List[Tuple[str, float]]:
    return [
        (key, value)
        for key, value in snapshot.values.items()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    ]


class ScheduledReporter(threading.Thread):
    """Daemon thread that exports the registry every ``interval_sec`` seconds.

    Subclasses implement :meth:`report`. A failing report is logged and the
    schedule continues; the registry is never touched beyond ``export()``.
    """

    reporter_name = "reporter"

    def __init__(
        self,
        registry: MetricRegistry,
        interval_sec: float = 60,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(daemon=True, name=f"{self.reporter_name}-reporter")
        self.registry = registry
        self.interval_sec = max(1.0, float(interval_sec))
        self.logger = logger or logging.getLogger(f"metriccatcher.reporting.{self.reporter_name}")
        self._stop_event = threading.Event()

    def run(self) -> None:
        self.logger.info(
            "reporter_start",
            extra={"reporter": self.reporter_name, "interval_sec": self.interval_sec},
        )
        while not self._stop_event.wait(self.interval_sec):
            self.report_once()
        self.close()

    def report_once(self) -> bool:
        try:
            snapshots = self.registry.export()
            self.report(snapshots, int(time.time()))
        except Exception as exc:
            self.logger.error(
                "reporter_failed",
                extra={"reporter": self.reporter_name, "error": str(exc)},
                exc_info=True,
            )
            return False
        return True

    def report(self, snapshots: Iterable[MetricSnapshot], timestamp: int) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def stop(self, timeout: float = 1.0) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout=timeout)
        else:
            self.close()


__all__ = ["ScheduledReporter", "metric_path", "numeric_fields", "sanitize"]
