"""
Translation Service

Validates requests, consults the cache, prompts Ollama and fans batches
out in bounded groups.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from localtranslate.core.config import settings
from localtranslate.core.logging import get_logger, log_with_context
from localtranslate.models import BatchItemResult, BatchResult, TranslationResult
from localtranslate.services.ollama_client import OllamaClient, OllamaError
from localtranslate.services.prompts import STOP_SEQUENCES, build_translation_prompt, clean_translation
from localtranslate.services.translation_cache import TranslationCache

logger = get_logger(__name__)


class TranslationValidationError(ValueError):
    """Request rejected before contacting Ollama."""

    pass


@dataclass
class HealthStatus:
    """Result of probing Ollama's model listing."""

    healthy: bool
    ollama_connected: bool
    models_available: int = 0
    qwen2_available: bool = False
    cache_keys: int = 0
    error: str | None = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class TranslationService:
    """
    Proxy between HTTP callers and the Ollama runtime.

    Provides methods to:
    - Probe runtime health
    - Translate a single text (cache-aware)
    - Translate a batch in concurrent groups
    - Inspect and clear the cache

    Concurrent requests for the same uncached text each reach Ollama;
    there is no in-flight de-duplication.
    """

    def __init__(
        self,
        ollama: OllamaClient,
        cache: TranslationCache,
        max_text_length: int | None = None,
        max_batch_size: int | None = None,
        group_size: int | None = None,
        group_delay: float | None = None,
        health_model_family: str | None = None,
    ):
        self.ollama = ollama
        self.cache = cache
        self.max_text_length = settings.max_text_length if max_text_length is None else max_text_length
        self.max_batch_size = settings.max_batch_size if max_batch_size is None else max_batch_size
        self.group_size = settings.batch_group_size if group_size is None else group_size
        if self.group_size < 1:
            raise ValueError("group_size must be at least 1")
        self.group_delay = settings.batch_group_delay if group_delay is None else group_delay
        self.health_model_family = health_model_family or settings.health_model_family

    @staticmethod
    def generation_options() -> dict[str, Any]:
        return {
            "top_p": settings.mt_top_p,
            "top_k": settings.mt_top_k,
            "repeat_penalty": settings.mt_repeat_penalty,
            "num_predict": settings.mt_num_predict,
        }

    # =========================================================================
    # Health
    # =========================================================================

    async def health(self) -> HealthStatus:
        """
        Probe Ollama's model listing endpoint.

        Any transport error or non-success status reports unhealthy.
        """
        try:
            models = await self.ollama.list_models()
        except OllamaError as e:
            return HealthStatus(healthy=False, ollama_connected=False, error=str(e))

        family_available = any(
            isinstance(model, dict) and self.health_model_family in str(model.get("name", ""))
            for model in models
        )
        return HealthStatus(
            healthy=True,
            ollama_connected=True,
            models_available=len(models),
            qwen2_available=family_available,
            cache_keys=self._cache_size(),
        )

    # =========================================================================
    # Single Translation
    # =========================================================================

    def validate_text(self, text: str | None) -> None:
        """
        Reject empty or oversized text.

        Raises:
            TranslationValidationError: If the text cannot be translated as-is
        """
        if not text or not text.strip():
            raise TranslationValidationError("Text must not be empty")
        if len(text) > self.max_text_length:
            raise TranslationValidationError(
                f"Text exceeds {self.max_text_length} characters, split it before translating"
            )

    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        model: str,
    ) -> TranslationResult:
        """
        Translate one text, serving from cache when possible.

        Args:
            text: Source text (1 to max_text_length characters)
            source_lang: Source language code or "auto"
            target_lang: Target language code
            model: Ollama model name

        Returns:
            TranslationResult: Success with translation, or failure with
            a message when Ollama could not be reached

        Raises:
            TranslationValidationError: If the text is empty or too long
        """
        self.validate_text(text)

        cache_key = TranslationCache.make_key(model, source_lang, target_lang, text)
        cached = self._cache_get(cache_key)
        if cached is not None:
            logger.info(f"Cache HIT for {source_lang}->{target_lang} (model={model})")
            return cached.cached_copy()
        logger.debug(f"Cache MISS for {source_lang}->{target_lang} (model={model})")

        prompt = build_translation_prompt(text, target_lang)
        logger.info(
            f"Translation request: model={model}, target={target_lang}, text_len={len(text)}"
        )

        try:
            generation = await self.ollama.generate(
                model=model,
                prompt=prompt,
                stop=STOP_SEQUENCES,
                options=self.generation_options(),
            )
        except OllamaError as e:
            logger.error(f"Translation failed for model {model}: {e}")
            return TranslationResult.failure(f"Translation failed: {e}", model=model)

        translation = clean_translation(generation.text)
        log_with_context(
            logger,
            logging.INFO,
            "Translation done",
            model=model,
            target_lang=target_lang,
            duration_ns=generation.total_duration,
            result_len=len(translation),
        )

        result = TranslationResult(
            success=True,
            translation=translation,
            model=model,
            stats=generation.stats,
            source_lang=source_lang,
            target_lang=target_lang,
        )
        self._cache_set(cache_key, result)
        return result

    # =========================================================================
    # Batch Translation
    # =========================================================================

    async def batch_translate(
        self,
        texts: list[str] | None,
        source_lang: str,
        target_lang: str,
        model: str,
    ) -> BatchResult:
        """
        Translate many texts in concurrent groups.

        Each group of group_size texts is translated concurrently and fully
        settled before the next group starts. Failed items keep their source
        text as translation. Results come back in input order.

        Raises:
            TranslationValidationError: If texts is empty or too large
        """
        if not texts:
            raise TranslationValidationError("Texts array must not be empty")
        if len(texts) > self.max_batch_size:
            raise TranslationValidationError(
                f"At most {self.max_batch_size} texts can be translated per batch"
            )

        logger.info(f"Batch translation started: {len(texts)} texts")
        start_time = time.perf_counter()

        results: list[BatchItemResult] = []
        for group_start in range(0, len(texts), self.group_size):
            group = texts[group_start:group_start + self.group_size]
            outcomes = await asyncio.gather(
                *(
                    self._translate_item(group_start + offset, text, source_lang, target_lang, model)
                    for offset, text in enumerate(group)
                ),
                return_exceptions=True,
            )

            for offset, outcome in enumerate(outcomes):
                index = group_start + offset
                if isinstance(outcome, Exception):
                    logger.error(f"Batch item {index} raised: {outcome}")
                    results.append(
                        BatchItemResult(
                            index=index,
                            success=False,
                            translation=group[offset],
                            error=str(outcome),
                            model=model,
                        )
                    )
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    results.append(outcome)

            if group_start + self.group_size < len(texts) and self.group_delay:
                await asyncio.sleep(self.group_delay)

        results.sort(key=lambda item: item.index)
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        log_with_context(
            logger,
            logging.INFO,
            "Batch translation finished",
            total_texts=len(texts),
            failed=sum(1 for item in results if not item.success),
            processing_time_ms=elapsed_ms,
        )

        return BatchResult(
            success=True,
            results=results,
            total_texts=len(texts),
            processing_time=elapsed_ms,
        )

    async def _translate_item(
        self,
        index: int,
        text: str,
        source_lang: str,
        target_lang: str,
        model: str,
    ) -> BatchItemResult:
        try:
            result = await self.translate(text, source_lang, target_lang, model)
        except TranslationValidationError as e:
            result = TranslationResult.failure(str(e), model=model)
        return BatchItemResult.from_result(index, text, result)

    # =========================================================================
    # Cache Management
    # =========================================================================

    def clear_cache(self) -> bool:
        self.cache.clear()
        return True

    def cache_stats(self) -> dict:
        stats = self.cache.get_stats()
        stats["keys_count"] = stats["keys"]
        return stats

    def _cache_size(self) -> int:
        try:
            return len(self.cache)
        except Exception as e:
            logger.warning(f"Failed to read cache size: {e}")
            return 0

    def _cache_get(self, key: str) -> TranslationResult | None:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed, treating as miss: {e}")
            return None

    def _cache_set(self, key: str, result: TranslationResult) -> None:
        try:
            self.cache.set(key, result)
        except Exception as e:
            logger.warning(f"Cache write failed, result not cached: {e}")
