"""In-memory TTL cache for resolved event records.

Entries are tuples of RawRecords keyed by the request's cache key and shared by
both output modes. An entry is written once and replaced wholesale when it
expires. Concurrent misses on the same key each compute independently; only
dict access is locked.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RawRecord

logger = logging.getLogger(__name__)


class EventCache:
    def __init__(self, ttl_seconds: float = 3600.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[Hashable, tuple[float, tuple[RawRecord, ...]]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable) -> tuple[RawRecord, ...] | None:
        """Return the live entry for ``key``, or None. Expired entries are evicted."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if now >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: Hashable, value: tuple[RawRecord, ...]) -> None:
        expires_at = self._clock() + self.ttl_seconds
        with self._lock:
            self._entries[key] = (expires_at, tuple(value))

    def get_or_compute(
        self, key: Hashable, compute: Callable[[], tuple[RawRecord, ...]]
    ) -> tuple[RawRecord, ...]:
        """Return the cached value for ``key`` or compute, store and return it.

        Exceptions from ``compute`` propagate and nothing is stored.
        """
        cached = self.get(key)
        if cached is not None:
            with self._lock:
                self._hits += 1
            logger.info(f"Cache hit for {key}")
            return cached

        with self._lock:
            self._misses += 1
        logger.info(f"Cache miss for {key}")
        value = tuple(compute())
        self.put(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict:
        now = self._clock()
        with self._lock:
            live = sum(1 for expires_at, _ in self._entries.values() if now < expires_at)
            return {
                "entries": live,
                "hits": self._hits,
                "misses": self._misses,
                "ttl_seconds": self.ttl_seconds,
            }

    def __len__(self) -> int:
        return self.stats()["entries"]
