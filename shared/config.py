"""
Shared configuration management for the query cache.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Cache configuration read from QUERY_CACHE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUERY_CACHE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="info")

    # Store
    cache_name: str = Field(default="default")
    max_size: int = Field(default=1000, gt=0)
    default_ttl: float = Field(default=60.0, allow_inf_nan=False)  # seconds

    # Reaper
    reaper_interval: float = Field(default=300.0, gt=0, allow_inf_nan=False)  # seconds
    reaper_enabled: bool = Field(default=True)


def get_config(**overrides) -> CacheSettings:
    """Get cache configuration, with explicit overrides taking precedence."""
    return CacheSettings(**overrides)
