"""
Health check endpoint.

Reports whether Ollama is reachable and the preferred model is installed.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from localtranslate.api.deps import get_translation_service
from localtranslate.core.config import settings
from localtranslate.core.logging import get_logger
from localtranslate.schemas.health import HealthResponse
from localtranslate.services.translation_service import TranslationService

logger = get_logger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    responses={503: {"model": HealthResponse, "description": "Ollama unreachable"}},
    summary="Health check",
)
async def health_check(
    service: TranslationService = Depends(get_translation_service),
) -> HealthResponse:
    """
    Probe Ollama's model listing with a short timeout.

    Returns:
        HealthResponse: 200 when Ollama answered, 503 otherwise
    """
    health = await service.health()

    if not health.healthy:
        logger.warning(f"Health check failed: {health.error}")
        response = HealthResponse(
            status="unhealthy",
            ollama_connected=False,
            error=health.error,
            timestamp=health.timestamp,
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(exclude_none=True),
        )

    return HealthResponse(
        status="healthy",
        ollama_connected=True,
        models_available=health.models_available,
        qwen2_available=health.qwen2_available,
        cache_keys=health.cache_keys,
        timestamp=health.timestamp,
    )
