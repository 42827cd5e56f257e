"""Shared fixtures for query cache tests."""

import logging

import pytest
import structlog
from prometheus_client import CollectorRegistry

from query_cache.store import QueryCache
from shared.metrics import MetricsCollector


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    """Fake clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def registry():
    """Isolated Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    """Metrics collector bound to the isolated registry."""
    return MetricsCollector("query_cache", registry)


@pytest.fixture
def cache(clock):
    """Small cache driven by the fake clock."""
    return QueryCache(max_size=3, default_ttl=60.0, clock=clock)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo global logging configuration made during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    root.setLevel(level)
