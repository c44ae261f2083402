"""
Pydantic schemas for API request/response validation.
"""

from localtranslate.schemas.cache import CacheStatsResponse, ClearCacheResponse
from localtranslate.schemas.health import HealthResponse
from localtranslate.schemas.translation import (
    BatchItem,
    BatchTranslateRequest,
    BatchTranslateResponse,
    ErrorResponse,
    LanguagesResponse,
    TranslateRequest,
    TranslateResponse,
)

__all__ = [
    "BatchItem",
    "BatchTranslateRequest",
    "BatchTranslateResponse",
    "CacheStatsResponse",
    "ClearCacheResponse",
    "ErrorResponse",
    "HealthResponse",
    "LanguagesResponse",
    "TranslateRequest",
    "TranslateResponse",
]
