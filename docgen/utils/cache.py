"""Lightweight in-memory cache shared by template loading requests."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class _CacheEntry:
    value: Any
    expires_at: Optional[float]

    def is_expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at


class Cache:
    """Concurrent-safe cache with TTL and size control.

    ``ttl=0`` keeps entries until they are evicted or the cache is cleared.
    ``max_size=None`` never evicts.
    """

    def __init__(self, max_size: Optional[int] = 1024, ttl: int = 0, name: str = "cache") -> None:
        self.max_size = None if max_size is None else max(1, int(max_size))
        self.default_ttl = max(0, int(ttl))
        self.name = name
        self._entries: Dict[Hashable, _CacheEntry] = {}
        self._lock = RLock()

    def _ensure_capacity(self) -> None:
        if self.max_size is None or len(self._entries) <= self.max_size:
            return
        # dicts keep insertion order, so the first keys are the oldest
        overflow = len(self._entries) - self.max_size
        for key in list(self._entries)[:overflow]:
            self._entries.pop(key, None)

    def _lookup(self, key: Hashable) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if entry.is_expired():
            self._entries.pop(key, None)
            return _MISSING
        return entry.value

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def set(self, key: Hashable, value: Any, ttl: Optional[int] = None) -> None:
        ttl_to_use = self.default_ttl if ttl is None else max(0, int(ttl))
        expires_at = time.monotonic() + ttl_to_use if ttl_to_use else None
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)
            self._ensure_capacity()

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("Cleared %s", self.name)

    def has(self, key: Hashable) -> bool:
        with self._lock:
            return self._lookup(key) is not _MISSING

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_compute(self, key: Hashable, factory: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Return the cached value for ``key``, computing it on a miss.

        The factory runs outside the lock, so two threads missing the same key
        may both compute it. Whichever stores first wins and both callers get
        that stored value.
        """
        with self._lock:
            cached = self._lookup(key)
        if cached is not _MISSING:
            logger.debug("%s hit: %s", self.name, key)
            return cached

        value = factory()

        with self._lock:
            cached = self._lookup(key)
            if cached is not _MISSING:
                return cached
            self.set(key, value, ttl=ttl)
        return value
