from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from metriccatcher.common.lru import LRUCache

DEFAULT_DEDUP_CAPACITY = 1000
DEFAULT_DEDUP_INITIAL_CAPACITY = 10


def digest(payload: bytes) -> str:
    return hashlib.md5(payload).hexdigest()


@dataclass
class Deduplicator:
    """Recency cache of datagram digests.

    Callers must pass only the bytes actually received; hashing a reused
    receive buffer would let stale tail bytes from a larger packet collide.
    """

    capacity: int = DEFAULT_DEDUP_CAPACITY
    initial_capacity: int = DEFAULT_DEDUP_INITIAL_CAPACITY
    duplicates: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self._seen: LRUCache[str, bool] = LRUCache(self.capacity, self.initial_capacity)

    def check_and_mark(self, payload: bytes) -> bool:
        key = digest(payload)
        if key in self._seen:
            self.duplicates += 1
            return True
        self._seen.put(key, True)
        return False

    def __contains__(self, payload: bytes) -> bool:
        return digest(payload) in self._seen

    @property
    def tracked(self) -> int:
        return len(self._seen)

    @property
    def stats(self) -> dict[str, int]:
        return {"tracked": self.tracked, "duplicates": self.duplicates}


__all__ = ["Deduplicator", "digest", "DEFAULT_DEDUP_CAPACITY"]
