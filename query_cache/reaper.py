"""
Background sweeper that purges expired cache entries on a fixed interval.
"""

import asyncio
import math
from typing import Optional

from shared.errors import ConfigurationError
from shared.logging import get_logger
from .store import QueryCache

DEFAULT_REAPER_INTERVAL = 300.0


class CacheReaper:
    """Periodically runs QueryCache.clean_expired until stopped."""

    def __init__(self, cache: QueryCache, interval: float = DEFAULT_REAPER_INTERVAL):
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or math.isnan(interval) or interval <= 0:
            raise ConfigurationError(
                "Reaper interval must be a positive number of seconds",
                details={"interval": repr(interval)}
            )

        self.cache = cache
        self.interval = float(interval)
        self.logger = get_logger("query_cache.reaper")

        self.sweeps = 0
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    async def start(self):
        """Start the reaper."""
        if self.running:
            self.logger.warning("Cache reaper already running", cache=self.cache.name)
            return

        self._stop_event = asyncio.Event()
        self.running = True
        self._task = asyncio.create_task(self._reap_loop())
        self.logger.info("Cache reaper started", cache=self.cache.name, interval=self.interval)

    async def stop(self):
        """Stop the reaper and wait for the loop to exit."""
        if self._task is None:
            return

        self.running = False
        self._stop_event.set()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
            self._stop_event = None

        self.logger.info("Cache reaper stopped", cache=self.cache.name, sweeps=self.sweeps)

    def run_once(self) -> int:
        """Run a single sweep; returns the number of entries removed."""
        try:
            if self.cache.metrics:
                with self.cache.metrics.time_operation("query_cache_sweep_duration_seconds", cache=self.cache.name):
                    removed = self.cache.clean_expired()
            else:
                removed = self.cache.clean_expired()
        except Exception as e:
            self.logger.error("Error in cache sweep", cache=self.cache.name, error=str(e))
            return 0

        self.sweeps += 1
        if removed:
            self.logger.info("Swept expired cache entries", cache=self.cache.name, removed=removed)
        else:
            self.logger.debug("Cache sweep found nothing to remove", cache=self.cache.name)
        return removed

    async def _reap_loop(self):
        """Sweep every interval until the stop event is set."""
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                self.run_once()
