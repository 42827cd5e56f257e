"""
Read-through helpers: check the cache, else compute and populate.

The cache lock is held only for the lookup and for the store, never while
the query runs. Two callers missing the same key at the same time may both
run the query; the later result replaces the earlier one.
"""

import functools
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from shared.logging import get_logger
from .keys import create_cache_key
from .store import QueryCache

T = TypeVar("T")

QueryFn = Callable[[], Union[T, Awaitable[T]]]

_MISSING = object()

logger = get_logger("query_cache.read_through")


async def cached_query(
    cache: QueryCache,
    key: str,
    query_fn: QueryFn,
    ttl: Optional[float] = None,
) -> T:
    """
    Return the cached value for key, or run query_fn and cache its result.

    query_fn may be a coroutine function or a plain callable. Its exceptions
    propagate unchanged and leave nothing cached, so the next call retries.
    """
    cached = cache.get(key, _MISSING)
    if cached is not _MISSING:
        return cached

    logger.debug("Cache miss, running query", cache=cache.name, key=key)

    if cache.metrics:
        with cache.metrics.time_operation("query_cache_query_duration_seconds", cache=cache.name):
            result = await _call(query_fn)
    else:
        result = await _call(query_fn)

    cache.set(key, result, ttl)
    return result


async def _call(query_fn: QueryFn) -> Any:
    result = query_fn()
    if inspect.isawaitable(result):
        result = await result
    return result


def cached(cache: QueryCache, prefix: str, ttl: Optional[float] = None) -> Callable:
    """
    Decorator caching a coroutine function's results by its arguments.

    The key is create_cache_key(prefix, bound_arguments) with defaults
    applied, so f(1) and f(x=1) share an entry. A leading self or cls is
    left out of the key, so all instances of a class share entries.
    """
    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        signature = inspect.signature(func)
        names = list(signature.parameters)
        receiver = names[0] if names and names[0] in ("self", "cls") else None

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            params = {name: value for name, value in bound.arguments.items() if name != receiver}
            key = create_cache_key(prefix, params)
            return await cached_query(cache, key, lambda: func(*args, **kwargs), ttl)

        return wrapper

    return decorator
