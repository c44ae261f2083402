"""
Translation endpoints.

Single and batch translation plus the supported language list.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from localtranslate.api.deps import get_translation_service
from localtranslate.core.config import settings
from localtranslate.core.logging import get_logger
from localtranslate.schemas.translation import (
    BatchItem,
    BatchTranslateRequest,
    BatchTranslateResponse,
    ErrorResponse,
    LanguagesResponse,
    TranslateRequest,
    TranslateResponse,
)
from localtranslate.services.prompts import SUPPORTED_LANGUAGES
from localtranslate.services.translation_service import (
    TranslationService,
    TranslationValidationError,
)

logger = get_logger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["Translation"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post(
    "/translate",
    response_model=TranslateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Translate a single text",
)
async def translate_text(
    request: TranslateRequest,
    service: TranslationService = Depends(get_translation_service),
) -> TranslateResponse:
    """
    Translate one text of at most max_text_length characters.

    Longer texts are rejected; callers split them first.
    """
    try:
        result = await service.translate(
            request.text,
            source_lang=request.source_lang,
            target_lang=request.target_lang,
            model=request.model,
        )
    except TranslationValidationError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))

    if not result.success:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, result.error or "Translation failed")

    return TranslateResponse(
        translation=result.translation or "",
        model=result.model or request.model,
        stats=result.stats,
        from_cache=result.from_cache,
    )


@router.post(
    "/translate/batch",
    response_model=BatchTranslateResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Translate several texts",
)
async def translate_batch(
    request: BatchTranslateRequest,
    service: TranslationService = Depends(get_translation_service),
) -> BatchTranslateResponse:
    """
    Translate up to max_batch_size texts.

    Per-item failures are reported in their result entry and never fail
    the whole call.
    """
    try:
        batch = await service.batch_translate(
            request.texts,
            source_lang=request.source_lang,
            target_lang=request.target_lang,
            model=request.model,
        )
    except TranslationValidationError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))

    return BatchTranslateResponse(
        results=[
            BatchItem(
                index=item.index,
                success=item.success,
                translation=item.translation,
                error=item.error,
                from_cache=item.from_cache,
                model=item.model,
                stats=item.stats,
            )
            for item in batch.results
        ],
        total_texts=batch.total_texts,
        processing_time=batch.processing_time,
    )


@router.get(
    "/languages",
    response_model=LanguagesResponse,
    summary="List supported target languages",
)
async def list_languages() -> LanguagesResponse:
    return LanguagesResponse(
        supported_languages=SUPPORTED_LANGUAGES,
        default_target=settings.default_target_lang,
    )
