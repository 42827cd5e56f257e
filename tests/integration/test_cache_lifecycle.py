"""
Integration tests for service-owned cache lifecycle.
"""

import asyncio
import logging

import pytest
import structlog
from unittest.mock import AsyncMock

from query_cache import (
    create_cache_key,
    create_query_cache,
    cached_query,
    query_cache_lifespan,
)
from shared.config import CacheSettings


class TestCacheLifecycle:
    """Integration tests for cache startup, request flow and shutdown."""

    @pytest.fixture
    def settings(self):
        return CacheSettings(
            _env_file=None,
            cache_name="projects",
            max_size=10,
            default_ttl=30.0,
            reaper_interval=0.01,
            reaper_enabled=True,
        )

    def test_create_query_cache(self, settings):
        cache = create_query_cache(settings)

        assert cache.name == "projects"
        assert cache.max_size == 10
        assert cache.default_ttl == 30.0

    def test_instances_are_isolated(self, settings):
        first = create_query_cache(settings)
        second = create_query_cache(settings)
        first.set("k", "v")

        assert second.get("k") is None

    @pytest.mark.asyncio
    async def test_request_flow(self, settings, clock):
        """Test key building, read-through and invalidation together."""
        cache = create_query_cache(settings, clock=clock)
        fetch_projects = AsyncMock(return_value=[{"id": 1, "status": "open"}])

        key = create_cache_key("projects", {"status": "open", "limit": 10})
        same_key = create_cache_key("projects", {"limit": 10, "status": "open"})

        await cached_query(cache, key, fetch_projects)
        await cached_query(cache, same_key, fetch_projects)
        fetch_projects.assert_awaited_once()

        cache.set("users:1", {"id": 1})
        cache.clear_pattern(r"^projects:")

        assert cache.get(key) is None
        assert cache.get("users:1") == {"id": 1}

        await cached_query(cache, key, fetch_projects)
        assert fetch_projects.await_count == 2

    @pytest.mark.asyncio
    async def test_lifespan_runs_reaper(self, settings):
        """Test the lifespan sweeps in the background and stops on exit."""
        async with query_cache_lifespan(settings) as cache:
            cache.set("stale", 1, ttl=0)
            cache.set("fresh", 2)

            for _ in range(100):
                if len(cache) == 1:
                    break
                await asyncio.sleep(0.01)

            assert len(cache) == 1
            assert cache.get("fresh") == 2

        cache.set("stale", 1, ttl=0)
        await asyncio.sleep(0.05)

        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_lifespan_without_reaper(self, settings):
        settings = settings.model_copy(update={"reaper_enabled": False})

        async with query_cache_lifespan(settings) as cache:
            cache.set("stale", 1, ttl=0)
            await asyncio.sleep(0.05)

            assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_lifespan_stops_reaper_on_error(self, settings):
        with pytest.raises(RuntimeError):
            async with query_cache_lifespan(settings) as cache:
                raise RuntimeError("handler failed")

        cache.set("stale", 1, ttl=0)
        await asyncio.sleep(0.05)

        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_lifespan_applies_log_level(self, settings):
        """Test the configured log level reaches the root logger."""
        settings = settings.model_copy(update={"log_level": "debug", "reaper_enabled": False})

        async with query_cache_lifespan(settings):
            assert structlog.is_configured()
            assert logging.getLogger().level == logging.DEBUG
