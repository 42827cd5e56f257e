"""
In-process query cache.

Provides a bounded, time-expiring store for expensive read results, a
deterministic key builder, read-through helpers and a background reaper.
Construct one cache per service at startup and pass it to request
handlers; there is no module-level instance.
"""

from .keys import create_cache_key
from .lifecycle import create_query_cache, query_cache_lifespan
from .read_through import cached, cached_query
from .reaper import CacheReaper
from .store import CacheEntry, QueryCache

__all__ = [
    "CacheEntry",
    "CacheReaper",
    "QueryCache",
    "cached",
    "cached_query",
    "create_cache_key",
    "create_query_cache",
    "query_cache_lifespan",
]
