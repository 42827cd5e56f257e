"""
Shared error handling for the query cache.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class QueryCacheException(Exception):
    """Base exception for query cache errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class CacheKeyError(QueryCacheException):
    """A cache key could not be built from the given parameters."""

    def __init__(self, message: str = "Cache key construction failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_KEY_ERROR", message, details)


class ConfigurationError(QueryCacheException):
    """Invalid cache or reaper configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
