from metriccatcher.ingest.decoder import MessageDecodeError, MetricUpdate, decode_message
from metriccatcher.ingest.dedup import Deduplicator
from metriccatcher.ingest.service import (
    MAX_DATAGRAM_BYTES,
    CatcherState,
    MetricCatcher,
    bind_udp_socket,
)

__all__ = [
    "CatcherState",
    "Deduplicator",
    "MAX_DATAGRAM_BYTES",
    "MessageDecodeError",
    "MetricCatcher",
    "MetricUpdate",
    "bind_udp_socket",
    "decode_message",
]
