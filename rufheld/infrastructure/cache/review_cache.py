"""
Review Cache - Time-Based Response Cache
=========================================

Caches the full review envelope per (place id, offset, sort) so repeated page
loads do not spend Wextractor API quota.

ARCHITECTURAL DECISION:
- The cache is an object owned by the application and injected into the
  review fetcher; there is no module-level cache state
- Freshness is checked at lookup time. A stale entry stays in the backend
  until it is overwritten or evicted
- Storage is pluggable (CacheBackend). InMemoryBackend serves a single
  process; a shared store can be plugged in for multi-process deployments

USAGE:
    cache = ReviewCache(ttl_seconds=300)
    key = ReviewCache.make_key("ChIJ...", 0, "lowest_rating")
    cache.put(key, payload)
    cache.get(key)  # payload while fresh, None afterwards
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Stored payload with its creation time (epoch milliseconds)."""
    payload: Any
    timestamp: float


class CacheBackend(ABC):
    """
    Key/value storage used by ReviewCache.
    Implement this interface to move the cache out of process.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key, or None."""
        ...

    @abstractmethod
    def peek(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key without marking it as used."""
        ...

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        """Store entry under key, replacing any previous one."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Keys from least to most recently used."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class InMemoryBackend(CacheBackend):
    """Process-local backend. Tracks recency for LRU eviction."""

    def __init__(self):
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def peek(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def keys(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._entries.keys()))

    def __len__(self) -> int:
        return len(self._entries)


def _now_ms() -> float:
    return time.time() * 1000


class ReviewCache:
    """
    TTL cache for review API responses.

    Entries are valid while `now - timestamp < ttl`. When max_entries is set
    and exceeded, expired entries are swept first, then the least recently
    used ones are evicted.
    """

    KEY_SEPARATOR = "_"

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 0,
        backend: Optional[CacheBackend] = None,
        clock: Callable[[], float] = _now_ms,
    ):
        self._ttl_ms = ttl_seconds * 1000
        self._max_entries = max_entries
        self._backend = backend if backend is not None else InMemoryBackend()
        self._clock = clock

    @classmethod
    def make_key(cls, place_id: str, offset: int, sort: str) -> str:
        return cls.KEY_SEPARATOR.join([str(place_id), str(offset), str(sort)])

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp < self._ttl_ms

    def get(self, key: str) -> Optional[Any]:
        """Return the cached payload if it is still fresh, else None."""
        entry = self._backend.get(key)
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.payload

    def put(self, key: str, payload: Any) -> None:
        """Store payload under key, overwriting any existing entry."""
        self._backend.set(key, CacheEntry(payload=payload, timestamp=self._clock()))
        if self._max_entries and len(self._backend) > self._max_entries:
            self._evict()

    def _evict(self) -> None:
        expired = []
        for key in self._backend.keys():
            entry = self._backend.peek(key)
            if entry is not None and not self._is_fresh(entry):
                expired.append(key)
        for key in expired:
            self._backend.delete(key)

        evicted = 0
        for key in self._backend.keys():
            if len(self._backend) <= self._max_entries:
                break
            self._backend.delete(key)
            evicted += 1

        logger.debug(f"Cache sweep: {len(expired)} expired, {evicted} evicted")

    def __len__(self) -> int:
        return len(self._backend)
