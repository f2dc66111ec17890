# src/tasktrack/infra/memory_cache.py

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Any, Callable

logger = logging.getLogger(__name__)


class MemoryCache:
    """
    In-process CacheService.

    Entries expire after their TTL (monotonic clock); expired entries are dropped
    lazily on access and by purge_expired().
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def _alive(self, key: str) -> tuple[Any, float] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._alive(key)
            return entry[0] if entry is not None else None

    def set(self, key: str, value: Any, ttl: timedelta) -> bool:
        seconds = ttl.total_seconds()
        if seconds <= 0:
            return False
        with self._lock:
            self._entries[key] = (value, self._clock() + seconds)
        return True

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._alive(key) is not None

    def update_expiration(self, key: str, ttl: timedelta) -> bool:
        with self._lock:
            entry = self._alive(key)
            if entry is None:
                return False
            self._entries[key] = (entry[0], self._clock() + ttl.total_seconds())
            return True

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            dead = [k for k, (_, exp) in self._entries.items() if exp <= now]
            for k in dead:
                del self._entries[k]
        if dead:
            logger.debug("Cache purged %d expired entries", len(dead))
        return len(dead)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
