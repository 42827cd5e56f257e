"""
Startup and shutdown wiring for a service-owned query cache.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from shared.config import CacheSettings, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector
from .reaper import CacheReaper
from .store import QueryCache

logger = get_logger("query_cache.lifecycle")


def create_query_cache(
    settings: Optional[CacheSettings] = None,
    *,
    metrics: Optional[MetricsCollector] = None,
    clock: Optional[Callable[[], float]] = None,
) -> QueryCache:
    """Build a QueryCache from settings."""
    settings = settings or get_config()
    return QueryCache(
        max_size=settings.max_size,
        default_ttl=settings.default_ttl,
        name=settings.cache_name,
        metrics=metrics,
        clock=clock,
    )


@asynccontextmanager
async def query_cache_lifespan(
    settings: Optional[CacheSettings] = None,
    *,
    metrics: Optional[MetricsCollector] = None,
) -> AsyncIterator[QueryCache]:
    """
    Own a cache for the lifetime of a service.

    Logging is configured at the settings' level, the reaper (when
    enabled) is started on enter and always stopped on exit, so no
    background task outlives the block.
    """
    settings = settings or get_config()
    configure_logging("query_cache", settings.log_level)
    cache = create_query_cache(settings, metrics=metrics)
    reaper = CacheReaper(cache, settings.reaper_interval) if settings.reaper_enabled else None

    if reaper:
        await reaper.start()
    logger.info(
        "Query cache ready",
        cache=cache.name,
        max_size=cache.max_size,
        default_ttl=cache.default_ttl,
        reaper_enabled=settings.reaper_enabled,
    )
    try:
        yield cache
    finally:
        if reaper:
            await reaper.stop()
        logger.info("Query cache shut down", cache=cache.name, stats=cache.get_stats())
