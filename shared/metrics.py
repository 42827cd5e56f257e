"""
Shared metrics configuration for the query cache.
"""

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry
from typing import Dict, Any, Optional
import time
from contextlib import contextmanager


class MetricsCollector:
    """Prometheus metrics for one or more query caches."""

    def __init__(self, service_name: str = "query_cache", registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up cache metrics."""
        self._metrics["query_cache_hits_total"] = Counter(
            "query_cache_hits_total",
            "Total cache hits",
            ["cache"],
            registry=self.registry
        )

        self._metrics["query_cache_misses_total"] = Counter(
            "query_cache_misses_total",
            "Total cache misses",
            ["cache"],
            registry=self.registry
        )

        self._metrics["query_cache_evictions_total"] = Counter(
            "query_cache_evictions_total",
            "Total entries removed by capacity, lazy expiry or sweep",
            ["cache", "reason"],
            registry=self.registry
        )

        self._metrics["query_cache_entries"] = Gauge(
            "query_cache_entries",
            "Number of entries currently tracked",
            ["cache"],
            registry=self.registry
        )

        self._metrics["query_cache_sweep_duration_seconds"] = Histogram(
            "query_cache_sweep_duration_seconds",
            "Expired-entry sweep duration in seconds",
            ["cache"],
            registry=self.registry
        )

        self._metrics["query_cache_query_duration_seconds"] = Histogram(
            "query_cache_query_duration_seconds",
            "Duration of the underlying query on a read-through miss",
            ["cache"],
            registry=self.registry
        )

    def record_hit(self, cache: str):
        self._metrics["query_cache_hits_total"].labels(cache=cache).inc()

    def record_miss(self, cache: str):
        self._metrics["query_cache_misses_total"].labels(cache=cache).inc()

    def record_eviction(self, cache: str, reason: str, count: int = 1):
        """Record removed entries; reason is capacity, expired or swept."""
        if count > 0:
            self._metrics["query_cache_evictions_total"].labels(cache=cache, reason=reason).inc(count)

    def set_size(self, cache: str, size: int):
        self._metrics["query_cache_entries"].labels(cache=cache).set(size)

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)

