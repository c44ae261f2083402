"""
Translation data model shared by the proxy service and the translator client.
"""

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass
class TranslationResult:
    """Outcome of translating one text."""

    success: bool
    translation: str | None = None
    error: str | None = None
    from_cache: bool = False
    model: str | None = None
    stats: dict[str, Any] | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    # Set by the client when it gives up, so callers can fall back to it
    original_text: str | None = None
    segments: int | None = None

    @classmethod
    def failure(cls, error: str, **kwargs: Any) -> "TranslationResult":
        return cls(success=False, error=error, **kwargs)

    def cached_copy(self) -> "TranslationResult":
        """Return a copy tagged as served from cache."""
        return replace(self, from_cache=True)


@dataclass
class BatchItemResult:
    """One translated item of a batch, tagged with its input position."""

    index: int
    success: bool
    translation: str
    error: str | None = None
    from_cache: bool = False
    model: str | None = None
    stats: dict[str, Any] | None = None

    @classmethod
    def from_result(cls, index: int, text: str, result: TranslationResult) -> "BatchItemResult":
        """
        Build a batch item from a single translation result.

        Failed items carry the source text as their translation.
        """
        if result.success:
            return cls(
                index=index,
                success=True,
                translation=result.translation or "",
                from_cache=result.from_cache,
                model=result.model,
                stats=result.stats,
            )
        return cls(
            index=index,
            success=False,
            translation=text,
            error=result.error,
            model=result.model,
        )


@dataclass
class BatchResult:
    """Outcome of a batch translation call."""

    success: bool
    results: list[BatchItemResult] = field(default_factory=list)
    total_texts: int = 0
    processing_time: int = 0
    error: str | None = None


@dataclass
class DocumentTranslation:
    """Summary of an in-place document translation."""

    success: bool
    translated_count: int = 0
    total_candidates: int = 0
    processing_time: int = 0
    error: str | None = None
