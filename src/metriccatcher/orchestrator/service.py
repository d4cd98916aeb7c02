from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from metriccatcher.common.logging import setup_logging
from metriccatcher.common.settings import Settings, compute_config_hash
from metriccatcher.ingest.dedup import Deduplicator
from metriccatcher.ingest.service import MetricCatcher, bind_udp_socket
from metriccatcher.metrics.registry import MetricRegistry
from metriccatcher.reporting import (
    FileReporter,
    GangliaReporter,
    GraphiteReporter,
    ScheduledReporter,
)

REPORTER_JOIN_TIMEOUT_SEC = 1.0


def build_reporters(
    settings: Settings, registry: MetricRegistry, logger: Optional[logging.Logger] = None
) -> List[ScheduledReporter]:
    reporters: List[ScheduledReporter] = []
    ganglia = settings.reporter("ganglia")
    if ganglia is not None:
        if logger is not None:
            logger.info(
                "reporter_configured",
                extra={"reporter": "ganglia", "host": ganglia.host, "port": ganglia.port},
            )
        reporters.append(
            GangliaReporter(registry, ganglia.host, ganglia.port, interval_sec=ganglia.interval_sec)
        )
    graphite = settings.reporter("graphite")
    if graphite is not None:
        if logger is not None:
            logger.info(
                "reporter_configured",
                extra={"reporter": "graphite", "host": graphite.host, "port": graphite.port},
            )
        reporters.append(
            GraphiteReporter(
                registry,
                graphite.host,
                graphite.port,
                prefix=graphite.prefix,
                interval_sec=graphite.interval_sec,
            )
        )
    file_cfg = settings.reporter("file")
    if file_cfg is not None:
        if logger is not None:
            logger.info(
                "reporter_configured",
                extra={"reporter": "file", "path": file_cfg.path},
            )
        reporters.append(FileReporter(registry, file_cfg.path, interval_sec=file_cfg.interval_sec))
    return reporters


@dataclass
class Orchestrator:
    settings: Settings
    registry: MetricRegistry = field(init=False)
    catcher: Optional[MetricCatcher] = field(default=None, init=False)
    reporters: List[ScheduledReporter] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.registry = MetricRegistry(max_metrics=self.settings.max_metrics)

    def run(self) -> None:
        logger = setup_logging(self.settings.app_log_path, self.settings.log_level)
        logger.info(
            "boot_start",
            extra={
                "environment": self.settings.environment,
                "config_hash": compute_config_hash(self.settings.config_path),
                "max_metrics": self.settings.max_metrics,
            },
        )
        try:
            asyncio.run(self.serve(logger))
        except KeyboardInterrupt:
            logger.info("shutdown_requested")
        except OSError as exc:
            logger.error("boot_failed", extra={"error": str(exc)})
            raise
        finally:
            self.stop_reporters()
            logger.info("shutdown_complete")

    async def serve(self, logger: logging.Logger) -> None:
        # A taken port is fatal; bind before any reporter thread starts.
        sock = bind_udp_socket(self.settings.udp_host, self.settings.udp_port)
        logger.info(
            "udp_listening",
            extra={"host": self.settings.udp_host, "port": self.settings.udp_port},
        )
        self.catcher = MetricCatcher(
            sock=sock,
            registry=self.registry,
            deduplicator=Deduplicator(capacity=self.settings.dedup_capacity),
            logger=logging.getLogger("metriccatcher.ingest"),
        )
        self.reporters = build_reporters(self.settings, self.registry, logger)
        for reporter in self.reporters:
            reporter.start()

        loop = asyncio.get_running_loop()
        _install_signal_handlers(loop, self.catcher, (signal.SIGINT, signal.SIGTERM))
        await self.catcher.run()

    def stop_reporters(self) -> None:
        for reporter in self.reporters:
            reporter.stop(timeout=REPORTER_JOIN_TIMEOUT_SEC)


def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop, catcher: MetricCatcher, signals: Iterable[int]
) -> None:
    def _request_stop() -> None:
        loop.create_task(catcher.stop())

    for sig in signals:
        try:
            loop.add_signal_handler(sig, _request_stop)
        except NotImplementedError:
            # add_signal_handler not supported on some platforms (e.g., Windows)
            signal.signal(sig, lambda _sig, _frame: loop.call_soon_threadsafe(_request_stop))


__all__ = ["Orchestrator", "build_reporters"]
