"""
In-process TTL cache for search results and embeddings.

Instances are constructed explicitly and injected; there is no module
level cache. All operations take one lock so the cache can be shared by
concurrent requests and by worker threads.

Dependencies: threading, hashlib (stdlib)
System role: Response/usage cache in front of external calls
"""

import hashlib
import json
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any, Generic, TypeVar

ValueT = TypeVar("ValueT")


def make_cache_key(*parts: Any) -> str:
    """
    Build a stable cache key from JSON-serializable parts.

    Args:
        *parts: Key components, e.g. ("search", normalized_query, filters)

    Returns:
        str: sha256 hex digest of the canonical JSON encoding
    """
    payload = json.dumps(parts, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class TTLCache(Generic[ValueT]):
    """
    Bounded mapping whose entries expire ``ttl_seconds`` after insertion.

    When full, the oldest inserted entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            ttl_seconds: Lifetime of each entry
            max_entries: Capacity before eviction
            clock: Monotonic time source (injectable for tests)
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, ValueT]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> ValueT | None:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return value

    def set(self, key: str, value: ValueT) -> None:
        """Insert or replace a value, restarting its TTL."""
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
