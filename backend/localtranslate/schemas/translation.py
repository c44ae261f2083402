"""
Translation request/response schemas.
"""

from typing import Any

from pydantic import BaseModel, Field

from localtranslate.core.config import settings


class ErrorResponse(BaseModel):
    """Error payload returned by every endpoint on failure."""

    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error message")


class TranslateRequest(BaseModel):
    """Request to translate a single text."""

    # Length limits are enforced by the service so callers get a clear message
    text: str | None = Field(default=None, description="Text to translate")
    source_lang: str = Field(default=settings.default_source_lang, description="Source language or 'auto'")
    target_lang: str = Field(default=settings.default_target_lang, description="Target language code")
    model: str = Field(default=settings.default_mt_model, description="Ollama model name")


class TranslateResponse(BaseModel):
    """Successful single translation."""

    success: bool = Field(default=True)
    translation: str = Field(description="Translated text")
    model: str = Field(description="Model that produced the translation")
    stats: dict[str, Any] | None = Field(default=None, description="Ollama timing and token counts")
    from_cache: bool = Field(description="Whether the result was served from cache")


class BatchTranslateRequest(BaseModel):
    """Request to translate several texts in one call."""

    texts: list[str] | None = Field(default=None, description="Texts to translate")
    source_lang: str = Field(default=settings.default_source_lang)
    target_lang: str = Field(default=settings.default_target_lang)
    model: str = Field(default=settings.default_mt_model)


class BatchItem(BaseModel):
    """One batch result, positioned by its input index."""

    index: int
    success: bool
    translation: str = Field(description="Translation, or the source text when the item failed")
    error: str | None = None
    from_cache: bool = False
    model: str | None = None
    stats: dict[str, Any] | None = None


class BatchTranslateResponse(BaseModel):
    """Batch translation results in input order."""

    success: bool = Field(default=True)
    results: list[BatchItem]
    total_texts: int
    processing_time: int = Field(description="Elapsed milliseconds")


class LanguagesResponse(BaseModel):
    """Supported target languages."""

    supported_languages: dict[str, str]
    default_target: str
