"""Thread-safe keyed collection with sorted-key iteration order."""

from __future__ import annotations

import bisect
import threading
from collections.abc import Iterable
from typing import Generic, TypeVar

V = TypeVar("V")


class OrderedCollection(Generic[V]):
    """Mapping from string key to value that iterates in ascending key order.

    The map and the sorted key list are guarded by one lock and are always
    updated together, so a reader on another thread never sees a key list
    that disagrees with the map. Every read returns a fresh list; callers
    never hold a reference to the live structures.

    Example:
        >>> pods = OrderedCollection[str]()
        >>> pods.set("kube-system/coredns", "Running")
        >>> pods.set("default/web", "Pending")
        >>> pods.keys()
        ['default/web', 'kube-system/coredns']
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, V] = {}
        self._keys: list[str] = []

    def set(self, key: str, value: V) -> None:
        """Insert or overwrite ``key``.

        Only a new key touches the key list; an overwrite is a plain map write.
        """
        with self._lock:
            if key not in self._items:
                bisect.insort(self._keys, key)
            self._items[key] = value

    def replace(self, items: Iterable[tuple[str, V]]) -> None:
        """Swap the whole contents for ``items`` in one locked step.

        Readers observe either the previous contents or the new ones, never
        a partially rebuilt collection. Duplicate keys keep the last value.
        """
        new_items = dict(items)
        new_keys = sorted(new_items)
        with self._lock:
            self._items = new_items
            self._keys = new_keys

    def get(self, key: str, default: V | None = None) -> V | None:
        """Return the value stored under ``key`` or ``default``."""
        with self._lock:
            return self._items.get(key, default)

    def delete(self, key: str) -> None:
        """Remove ``key``; no-op when absent."""
        with self._lock:
            if key not in self._items:
                return
            del self._items[key]
            del self._keys[bisect.bisect_left(self._keys, key)]

    def values(self) -> list[V]:
        """Snapshot of the values in ascending key order."""
        with self._lock:
            return [self._items[k] for k in self._keys]

    def keys(self) -> list[str]:
        """Snapshot of the keys in ascending order."""
        with self._lock:
            return list(self._keys)

    def clear(self) -> None:
        with self._lock:
            self._items = {}
            self._keys = []

    def len(self) -> int:
        """Current number of entries."""
        with self._lock:
            return len(self._items)

    def __len__(self) -> int:
        return self.len()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items
