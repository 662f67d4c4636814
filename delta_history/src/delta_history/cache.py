"""Bounded LRU cache for raw diff text.

Keys are commit hashes or ``"older..newer"`` range keys (see
:func:`range_key`); values are the raw diff text returned by git. A cache hit
lets the session skip the git subprocess entirely.
"""

from __future__ import annotations

from collections import OrderedDict

from .utils.logger import log

DEFAULT_CAPACITY = 50


def range_key(older: str, newer: str) -> str:
    """Cache key for the diff between two commits."""
    return f"{older}..{newer}"


class DiffCache:
    """String to string LRU cache with a fixed capacity."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            log.warning(f"[CACHE] Invalid capacity {capacity}, using {DEFAULT_CAPACITY}")
            capacity = DEFAULT_CAPACITY
        self._capacity = capacity
        self._entries: OrderedDict[str, str] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: str) -> str | None:
        """Return the cached value and mark it most recently used."""
        value = self._entries.get(key)
        if value is not None:
            self._entries.move_to_end(key)
        return value

    def put(self, key: str, value: str) -> None:
        """Insert or refresh an entry, evicting the least recently used one when full."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = value
        while len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            log.debug(f"[CACHE] Evicted {evicted}")

    def contains(self, key: str) -> bool:
        """Membership test that does not affect recency."""
        return key in self._entries

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
