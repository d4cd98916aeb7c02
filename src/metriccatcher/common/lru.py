from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Generic, Hashable, List, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Bounded mapping that evicts the least-recently-used entry.

    ``get`` counts as a use; ``peek`` and membership tests do not. All
    operations hold a single lock so readers on other threads can take
    ``items()`` snapshots while the owner keeps inserting.
    """

    def __init__(self, max_entries: int, initial_capacity: int = 10) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = int(max_entries)
        # Capacity hint only; OrderedDict cannot be presized.
        self.initial_capacity = int(initial_capacity)
        self._entries: "OrderedDict[K, V]" = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: K) -> Optional[V]:
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def peek(self, key: K) -> Optional[V]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: K, value: V) -> List[Tuple[K, V]]:
        evicted: List[Tuple[K, V]] = []
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted.append(self._entries.popitem(last=False))
        return evicted

    def pop(self, key: K) -> Optional[V]:
        with self._lock:
            return self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> List[K]:
        with self._lock:
            return list(self._entries.keys())

    def items(self) -> List[Tuple[K, V]]:
        with self._lock:
            return list(self._entries.items())


__all__ = ["LRUCache"]
