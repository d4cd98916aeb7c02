"""
UDP ingestion loop.

Each iteration receives one datagram, drops it if its digest was seen
recently, decodes the JSON batch and applies every update to the registry.
Nothing is queued: the receive is the only suspension point, and stop()
cancels it so shutdown never waits for another packet.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from metriccatcher.ingest.decoder import MessageDecodeError, decode_message
from metriccatcher.ingest.dedup import Deduplicator
from metriccatcher.metrics.registry import MetricRegistry

# Larger datagrams are truncated by the transport; there is no reassembly.
MAX_DATAGRAM_BYTES = 24258

Address = Tuple[Any, ...]


class CatcherState(str, Enum):
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"


@dataclass
class IngestStats:
    received: int = 0
    duplicates: int = 0
    decode_failures: int = 0
    updates_applied: int = 0
    receive_errors: int = 0


def bind_udp_socket(host: str, port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, port))
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


@dataclass
class MetricCatcher:
    sock: socket.socket
    registry: MetricRegistry
    deduplicator: Deduplicator = field(default_factory=Deduplicator)
    logger: Optional[logging.Logger] = None
    stats: IngestStats = field(default_factory=IngestStats, init=False)

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = logging.getLogger("metriccatcher.ingest")
        self._stopped = asyncio.Event()
        self._receive_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> CatcherState:
        return CatcherState.STOPPING if self._stopped.is_set() else CatcherState.RUNNING

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        self.logger.info("catcher_start", extra={"address": str(self.sock.getsockname())})
        try:
            while not self._stopped.is_set():
                self._receive_task = asyncio.ensure_future(
                    loop.sock_recvfrom(self.sock, MAX_DATAGRAM_BYTES)
                )
                try:
                    payload, addr = await self._receive_task
                except asyncio.CancelledError:
                    if self._stopped.is_set():
                        break
                    raise
                except OSError as exc:
                    self.stats.receive_errors += 1
                    self.logger.warning("receive_failed", extra={"error": str(exc)})
                    continue
                finally:
                    self._receive_task = None
                self.handle_datagram(payload, addr)
        finally:
            self.sock.close()
            self.logger.info("catcher_stopped", extra={"stats": asdict(self.stats)})

    def handle_datagram(self, payload: bytes, addr: Optional[Address] = None) -> int:
        self.stats.received += 1
        self.logger.debug("datagram_received", extra={"source": str(addr), "bytes": len(payload)})
        if self.deduplicator.check_and_mark(payload):
            self.stats.duplicates += 1
            self.logger.info("duplicate_skipped", extra={"source": str(addr)})
            return 0
        try:
            updates = decode_message(payload)
        except MessageDecodeError as exc:
            self.stats.decode_failures += 1
            self.logger.warning(
                "decode_failed",
                extra={"error": exc.reason, "payload": exc.payload_text(), "source": str(addr)},
            )
            return 0
        applied = self.registry.apply(updates)
        self.stats.updates_applied += applied
        return applied

    async def stop(self) -> None:
        self.logger.info("catcher_stop_requested")
        self._stopped.set()
        task = self._receive_task
        if task is not None and not task.done():
            task.cancel()


__all__ = [
    "CatcherState",
    "IngestStats",
    "MAX_DATAGRAM_BYTES",
    "MetricCatcher",
    "bind_udp_socket",
]
