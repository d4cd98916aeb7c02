from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from metriccatcher.metrics.registry import MetricRegistry, MetricSnapshot
from metriccatcher.reporting.base import ScheduledReporter


def snapshot_payload(snapshots: Iterable[MetricSnapshot], timestamp: int) -> Dict[str, Any]:
    return {
        "ts": datetime.fromtimestamp(timestamp, timezone.utc).isoformat(),
        "metrics": [
            {
                "name": snapshot.name,
                "group": snapshot.group,
                "category": snapshot.category,
                "short_name": snapshot.short_name,
                "kind": snapshot.kind.value,
                "values": snapshot.values,
            }
            for snapshot in snapshots
        ],
    }


class FileReporter(ScheduledReporter):
    """Appends one JSON line per report to ``metrics_log_path``."""

    reporter_name = "file"

    def __init__(
        self,
        registry: MetricRegistry,
        metrics_log_path: str,
        interval_sec: float = 60,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(registry, interval_sec=interval_sec, logger=logger)
        path = Path(metrics_log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.metrics_log_path = path
        self._file = path.open("a", encoding="utf-8")

    def report(self, snapshots: Iterable[MetricSnapshot], timestamp: int) -> None:
        line = f"[METRICS] {json.dumps(snapshot_payload(snapshots, timestamp), ensure_ascii=True)}"
        self._file.write(line + "\n")
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


__all__ = ["FileReporter", "snapshot_payload"]
