"""
Shared utilities for the query cache.

This package aggregates the ambient building blocks used by `query_cache`:

- config: Cache configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Do not import from `query_cache` into shared/.
"""
