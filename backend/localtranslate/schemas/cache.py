"""
Pydantic schemas for translation cache management.
"""

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    """Cache statistics."""

    hits: int = Field(..., description="Lookups served from cache")
    misses: int = Field(..., description="Lookups that found no live entry")
    keys: int = Field(..., description="Number of live entries")
    ksize: int = Field(..., description="Total key length in characters")
    vsize: int = Field(..., description="Total cached translation length in characters")
    keys_count: int = Field(..., description="Number of live entries")


class ClearCacheResponse(BaseModel):
    """Response after clearing the cache."""

    success: bool = Field(..., description="Whether the cache was cleared")
    message: str = Field(..., description="Status message")
