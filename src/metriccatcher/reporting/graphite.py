from __future__ import annotations

import logging
import socket
from typing import Iterable, List, Optional

from metriccatcher.metrics.registry import MetricRegistry, MetricSnapshot
from metriccatcher.reporting.base import ScheduledReporter, metric_path, numeric_fields

CONNECT_TIMEOUT_SEC = 5.0


def format_lines(
    snapshots: Iterable[MetricSnapshot], timestamp: int, prefix: Optional[str] = None
) -> List[str]:
    lines: List[str] = []
    for snapshot in snapshots:
        for field_name, value in numeric_fields(snapshot):
            lines.append(f"{metric_path(snapshot, field_name, prefix)} {value} {timestamp}\n")
    return lines


class GraphiteReporter(ScheduledReporter):
    """Pushes snapshots to Carbon over the plaintext TCP protocol.

    One connection per report; ``prefix`` defaults to the local hostname.
    """

    reporter_name = "graphite"

    def __init__(
        self,
        registry: MetricRegistry,
        host: str,
        port: int,
        prefix: Optional[str] = None,
        interval_sec: float = 60,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(registry, interval_sec=interval_sec, logger=logger)
        self.host = host
        self.port = port
        self.prefix = prefix if prefix is not None else socket.gethostname()

    def report(self, snapshots: Iterable[MetricSnapshot], timestamp: int) -> None:
        lines = format_lines(snapshots, timestamp, self.prefix)
        if not lines:
            return
        with socket.create_connection((self.host, self.port), timeout=CONNECT_TIMEOUT_SEC) as conn:
            conn.sendall("".join(lines).encode("utf-8"))
        self.logger.debug("graphite_report_sent", extra={"lines": len(lines)})


__all__ = ["GraphiteReporter", "format_lines"]
