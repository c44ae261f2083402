"""
Translation cache management endpoints.
"""

from fastapi import APIRouter, Depends

from localtranslate.api.deps import get_translation_service
from localtranslate.core.config import settings
from localtranslate.core.logging import get_logger
from localtranslate.schemas.cache import CacheStatsResponse, ClearCacheResponse
from localtranslate.services.translation_service import TranslationService

logger = get_logger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/cache", tags=["Cache"])


@router.get(
    "/stats",
    response_model=CacheStatsResponse,
    summary="Get cache statistics",
)
async def get_cache_stats(
    service: TranslationService = Depends(get_translation_service),
) -> CacheStatsResponse:
    """
    Get translation cache statistics.

    Returns:
        Hit/miss counters, live key count and approximate sizes
    """
    stats = service.cache_stats()
    logger.info(f"Retrieved cache stats: {stats}")
    return CacheStatsResponse(**stats)


@router.delete(
    "",
    response_model=ClearCacheResponse,
    summary="Clear the translation cache",
)
async def clear_cache(
    service: TranslationService = Depends(get_translation_service),
) -> ClearCacheResponse:
    """Remove every cached translation."""
    service.clear_cache()
    return ClearCacheResponse(success=True, message="Cache cleared")
