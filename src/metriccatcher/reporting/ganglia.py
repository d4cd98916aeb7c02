"""
Ganglia reporter speaking the gmond 3.1 wire format (XDR over UDP).

Every numeric field goes out as two packets: a metadata packet declaring the
metric as a double in the metric's group, followed by a string value packet.
"""

from __future__ import annotations

import logging
import socket
import struct
from typing import Iterable, List, Optional

from metriccatcher.metrics.registry import MetricRegistry, MetricSnapshot
from metriccatcher.reporting.base import ScheduledReporter, metric_path, numeric_fields

GMETADATA_FULL = 128
GMETRIC_STRING = 133
SLOPE_BOTH = 3
DEFAULT_TMAX_SEC = 60


def xdr_int(value: int) -> bytes:
    return struct.pack(">i", value)


def xdr_uint(value: int) -> bytes:
    return struct.pack(">I", value)


def xdr_string(value: str) -> bytes:
    data = value.encode("utf-8")
    padding = (4 - len(data) % 4) % 4
    return xdr_uint(len(data)) + data + b"\x00" * padding


def metadata_packet(
    hostname: str, name: str, group: str, units: str = "", tmax: int = DEFAULT_TMAX_SEC
) -> bytes:
    return b"".join(
        [
            xdr_int(GMETADATA_FULL),
            xdr_string(hostname),
            xdr_string(name),
            xdr_int(0),
            xdr_string("double"),
            xdr_string(name),
            xdr_string(units),
            xdr_int(SLOPE_BOTH),
            xdr_uint(tmax),
            xdr_uint(0),
            xdr_int(1),
            xdr_string("GROUP"),
            xdr_string(group),
        ]
    )


def value_packet(hostname: str, name: str, value: float) -> bytes:
    return b"".join(
        [
            xdr_int(GMETRIC_STRING),
            xdr_string(hostname),
            xdr_string(name),
            xdr_int(0),
            xdr_string("%s"),
            xdr_string(repr(float(value))),
        ]
    )


def build_packets(
    snapshots: Iterable[MetricSnapshot], hostname: str, tmax: int = DEFAULT_TMAX_SEC
) -> List[bytes]:
    packets: List[bytes] = []
    for snapshot in snapshots:
        for field_name, value in numeric_fields(snapshot):
            name = metric_path(snapshot, field_name)
            packets.append(metadata_packet(hostname, name, snapshot.group, tmax=tmax))
            packets.append(value_packet(hostname, name, value))
    return packets


class GangliaReporter(ScheduledReporter):
    reporter_name = "ganglia"

    def __init__(
        self,
        registry: MetricRegistry,
        host: str,
        port: int,
        interval_sec: float = 60,
        hostname: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(registry, interval_sec=interval_sec, logger=logger)
        self.host = host
        self.port = port
        self.hostname = hostname or socket.gethostname()
        self._sock: Optional[socket.socket] = None

    def _socket(self) -> socket.socket:
        if self._sock is None:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        return self._sock

    def report(self, snapshots: Iterable[MetricSnapshot], timestamp: int) -> None:
        packets = build_packets(snapshots, self.hostname, tmax=int(self.interval_sec))
        try:
            sock = self._socket()
            for packet in packets:
                sock.sendto(packet, (self.host, self.port))
        except OSError:
            self.close()
            raise
        self.logger.debug("ganglia_report_sent", extra={"packets": len(packets)})

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


__all__ = ["GangliaReporter", "build_packets", "metadata_packet", "value_packet"]
