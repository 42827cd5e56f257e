"""
In-process query result cache with TTL and capacity bounds.

Entries are kept in insertion order. When the store is full the
earliest-inserted entry is evicted; reads never promote an entry.
"""

import math
import re
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

T = TypeVar("T")

DEFAULT_MAX_SIZE = 1000
DEFAULT_TTL = 60.0

KeyPattern = Union[str, "re.Pattern[str]", Callable[[str], bool]]


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with its creation time and time-to-live (seconds)."""
    data: T
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        # Non-positive TTLs are stale even when the clock has not moved
        return self.ttl <= 0 or now - self.created_at > self.ttl


class QueryCache:
    """Bounded, time-expiring key/value store guarded by a single lock."""

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl: float = DEFAULT_TTL,
        *,
        name: str = "default",
        metrics: Optional[MetricsCollector] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 1:
            raise ConfigurationError(
                "max_size must be a positive integer",
                details={"max_size": max_size}
            )
        if isinstance(default_ttl, bool) or not isinstance(default_ttl, (int, float)) or math.isnan(default_ttl):
            raise ConfigurationError(
                "default_ttl must be a number of seconds",
                details={"default_ttl": repr(default_ttl)}
            )

        self.max_size = max_size
        self.default_ttl = float(default_ttl)
        self.name = name
        self.metrics = metrics
        self.logger = get_logger("query_cache.store")

        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, CacheEntry[Any]]" = OrderedDict()
        self._lock = threading.Lock()

        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str, default: Any = None) -> Any:
        """Get cached value, or default if the key is unknown or expired."""
        expired = False
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(self._clock()):
                del self._entries[key]
                self.expirations += 1
                expired = True
                entry = None

            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
            size = len(self._entries)

        if expired:
            self.logger.debug("Expired cache entry removed on read", cache=self.name, key=key)
        self._record_lookup(hit=entry is not None, expired=expired, size=size)

        return default if entry is None else entry.data

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Cache a value; ttl=None uses the default TTL and a NaN ttl raises ValueError."""
        entry_ttl = self.default_ttl if ttl is None else float(ttl)
        if math.isnan(entry_ttl):
            raise ValueError("ttl must be a number of seconds, not NaN")
        evicted: Optional[str] = None

        with self._lock:
            if key in self._entries:
                # Replacement takes the newest position with a fresh created_at
                del self._entries[key]
            elif len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                self.evictions += 1

            self._entries[key] = CacheEntry(data=value, created_at=self._clock(), ttl=entry_ttl)
            size = len(self._entries)

        if evicted is not None:
            self.logger.debug("Evicted oldest cache entry", cache=self.name, key=evicted, max_size=self.max_size)
            if self.metrics:
                self.metrics.record_eviction(self.name, "capacity")
        self._record_size(size)

    def delete(self, key: str) -> None:
        """Delete cache entry; unknown keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)
            size = len(self._entries)
        self._record_size(size)

    def clear_pattern(self, pattern: KeyPattern) -> int:
        """
        Delete every key matching pattern.

        A string is compiled as a regular expression; string and compiled
        patterns match anywhere in the key. A callable is used as the
        predicate directly. Returns the number of deleted keys.
        """
        predicate = self._compile_predicate(pattern)

        with self._lock:
            matched: List[str] = [key for key in self._entries if predicate(key)]
            for key in matched:
                del self._entries[key]
            size = len(self._entries)

        if matched:
            self.logger.info("Cleared cache pattern", cache=self.name, keys_count=len(matched))
        self._record_size(size)
        return len(matched)

    def clear(self) -> None:
        """Delete all entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()

        self.logger.info("Cleared cache", cache=self.name, keys_count=count)
        self._record_size(0)

    def clean_expired(self) -> int:
        """Delete every expired entry; returns the number removed."""
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in stale:
                del self._entries[key]
            self.expirations += len(stale)
            size = len(self._entries)

        if self.metrics:
            self.metrics.record_eviction(self.name, "swept", len(stale))
        self._record_size(size)
        return len(stale)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self.hits + self.misses
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": self.hits / total if total > 0 else 0.0,
                "evictions": self.evictions,
                "expirations": self.expirations,
            }

    @staticmethod
    def _compile_predicate(pattern: KeyPattern) -> Callable[[str], bool]:
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        if isinstance(pattern, re.Pattern):
            regex = pattern
            return lambda key: regex.search(key) is not None
        if callable(pattern):
            return pattern
        raise TypeError(f"Unsupported key pattern: {pattern!r}")

    def _record_lookup(self, hit: bool, expired: bool, size: int) -> None:
        if not self.metrics:
            return
        if hit:
            self.metrics.record_hit(self.name)
        else:
            self.metrics.record_miss(self.name)
        if expired:
            self.metrics.record_eviction(self.name, "expired")
            self.metrics.set_size(self.name, size)

    def _record_size(self, size: int) -> None:
        if self.metrics:
            self.metrics.set_size(self.name, size)
