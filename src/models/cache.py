"""
Cache entry, statistics and configuration models.
"""
import os
from typing import Any, Optional
from pydantic import BaseModel, Field

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_SIZE = 10 * 1024 * 1024


class CacheEntry(BaseModel):
    """
    One cached value. Replaced wholesale on write.
    """
    data: Any
    timestamp: float
    expires_at: Optional[float] = None
    version: str
    size: int = Field(..., ge=0)
    compressed: bool = False
    priority: str = Field("normal", pattern="^(low|normal|high)$")

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class CacheStats(BaseModel):
    """
    Hit/miss counters and aggregate size, persisted next to the cache.
    """
    hits: int = 0
    misses: int = 0
    size: int = 0
    item_count: int = 0
    last_cleanup: float = 0.0


class CacheConfig(BaseModel):
    """
    Cache configuration.
    """
    default_ttl: float = DEFAULT_TTL_SECONDS
    max_size: int = Field(DEFAULT_MAX_SIZE, gt=0)
    enable_compression: bool = False
    version: str = "1.0"

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Build configuration from CACHE_* environment variables."""
        return cls(
            default_ttl=float(os.environ.get("CACHE_DEFAULT_TTL", DEFAULT_TTL_SECONDS)),
            max_size=int(os.environ.get("CACHE_MAX_SIZE", DEFAULT_MAX_SIZE)),
            enable_compression=os.environ.get("CACHE_ENABLE_COMPRESSION", "false").lower() in ("1", "true", "yes"),
            version=os.environ.get("CACHE_VERSION", "1.0"),
        )
