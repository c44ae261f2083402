"""
Translator client for the local translation service.

Used by page-side code to translate single texts, long texts, batches
and whole documents, with retries on failed requests.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from localtranslate.client.document import Document
from localtranslate.client.segmenter import should_translate, split_text
from localtranslate.core.config import settings
from localtranslate.core.logging import get_logger
from localtranslate.models import (
    BatchItemResult,
    BatchResult,
    DocumentTranslation,
    TranslationResult,
)

logger = get_logger(__name__)

FALLBACK_LANGUAGES = {
    "supported_languages": {
        "zh-tw": "繁體中文 (台灣)",
        "zh-cn": "簡體中文",
        "en": "English",
        "ja": "日本語",
        "ko": "한국어",
    },
    "default_target": "zh-tw",
}


class TranslatorClientError(Exception):
    """A translation request failed and may be retried."""

    pass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings for single-text requests.

    Waits backoff_seconds * attempt_number after each failed attempt.
    """

    max_attempts: int = 3
    backoff_seconds: float = 1.0

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.translator_max_attempts,
            backoff_seconds=settings.translator_retry_backoff,
        )

    def retrying(self, **kwargs: Any) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            retry=retry_if_exception_type(TranslatorClientError),
            reraise=True,
            **kwargs,
        )


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Translation attempt {retry_state.attempt_number} failed: {error}; "
        f"retrying in {retry_state.next_action.sleep if retry_state.next_action else 0}s"
    )


class TranslatorClient:
    """
    Async HTTP client for the translation service.

    Provides methods for:
    - Health checking the service
    - Translating a single text with retries
    - Translating long texts segment by segment
    - Batch translation
    - Translating a document in place with bilingual blocks
    - Listing languages and clearing the service cache
    """

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        retry_policy: RetryPolicy | None = None,
        segment_length: int | None = None,
        segment_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize translator client.

        Args:
            base_url: Service API base URL (defaults to settings.translator_api_url)
            model: Ollama model to request (defaults to settings.default_mt_model)
            timeout: Per-request timeout in seconds, doubled for batches
            retry_policy: Retry settings for single-text requests
            segment_length: Maximum characters per segment for long texts
            segment_delay: Pause between segments in seconds
            transport: Optional httpx transport, used to stub the service in tests
        """
        self.base_url = (base_url or settings.translator_api_url).rstrip("/")
        self.model = model or settings.default_mt_model
        self.timeout = timeout or settings.translator_timeout
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.max_text_length = settings.max_text_length
        self.max_batch_size = settings.max_batch_size
        self.segment_length = min(segment_length or settings.translator_segment_length, self.max_text_length)
        self.segment_delay = settings.translator_segment_delay if segment_delay is None else segment_delay
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    @staticmethod
    def _decode(response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def _post(self, path: str, payload: dict, timeout: float) -> dict:
        """
        POST to the service and return a successful JSON payload.

        Raises:
            TranslatorClientError: Transport errors, non-2xx statuses and
                payloads flagged success=false
        """
        try:
            async with self._client(timeout) as client:
                response = await client.post(f"{self.base_url}{path}", json=payload)
        except httpx.TimeoutException as e:
            raise TranslatorClientError(f"Request timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise TranslatorClientError(f"Connection failed: {e}") from e

        data = self._decode(response)
        if response.status_code >= 400:
            raise TranslatorClientError(data.get("error") or f"HTTP {response.status_code}")
        if not data.get("success"):
            raise TranslatorClientError(data.get("error") or "Translation failed")
        return data

    # =========================================================================
    # Service Status
    # =========================================================================

    async def check_health(self) -> bool:
        """
        Check that the service is healthy and the preferred model is installed.

        Returns:
            bool: True if usable, False otherwise
        """
        try:
            async with self._client(settings.ollama_health_timeout) as client:
                response = await client.get(f"{self.base_url}/health")
            if response.status_code != 200:
                raise TranslatorClientError(f"HTTP {response.status_code}")
            data = self._decode(response)
            return data.get("status") == "healthy" and bool(data.get("qwen2_available"))
        except (httpx.HTTPError, TranslatorClientError) as e:
            logger.error(f"Health check failed: {e}")
            return False

    async def get_supported_languages(self) -> dict:
        """Get the service language list, or a built-in list if unreachable."""
        try:
            async with self._client(self.timeout) as client:
                response = await client.get(f"{self.base_url}/languages")
            if response.is_success:
                data = self._decode(response)
                if data:
                    return data
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch language list: {e}")

        return FALLBACK_LANGUAGES

    async def clear_cache(self) -> bool:
        """Ask the service to drop its translation cache."""
        try:
            async with self._client(self.timeout) as client:
                response = await client.delete(f"{self.base_url}/cache")
            return response.is_success
        except httpx.HTTPError as e:
            logger.error(f"Failed to clear cache: {e}")
            return False

    # =========================================================================
    # Translation
    # =========================================================================

    async def translate_text(
        self,
        text: str,
        source_lang: str = "auto",
        target_lang: str = "zh-tw",
    ) -> TranslationResult:
        """
        Translate one text, retrying failed attempts.

        Texts longer than the service limit are segmented instead.

        Returns:
            TranslationResult: On final failure, carries original_text so
            the caller can fall back to it
        """
        if not text or not text.strip():
            return TranslationResult.failure("Text is empty")

        if len(text) > self.max_text_length:
            return await self.split_and_translate(text, source_lang, target_lang)

        payload = {
            "text": text,
            "source_lang": source_lang,
            "target_lang": target_lang,
            "model": self.model,
        }

        attempt_number = 0
        try:
            async for attempt in self.retry_policy.retrying(before_sleep=_log_retry):
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    data = await self._post("/translate", payload, self.timeout)
        except TranslatorClientError as e:
            logger.error(f"Translation failed after {attempt_number} attempts: {e}")
            return TranslationResult.failure(
                f"Translation failed ({self.retry_policy.max_attempts} attempts): {e}",
                source_lang=source_lang,
                target_lang=target_lang,
                original_text=text,
            )

        logger.info(f"Translation succeeded on attempt {attempt_number}, cached={data.get('from_cache')}")
        return TranslationResult(
            success=True,
            translation=data.get("translation", ""),
            from_cache=bool(data.get("from_cache")),
            model=data.get("model"),
            stats=data.get("stats"),
            source_lang=source_lang,
            target_lang=target_lang,
        )

    async def split_and_translate(
        self,
        text: str,
        source_lang: str = "auto",
        target_lang: str = "zh-tw",
    ) -> TranslationResult:
        """
        Translate a long text segment by segment.

        Segments that still fail after retries keep their original text,
        so the call itself always succeeds.
        """
        segments = split_text(text, self.segment_length)
        translations: list[str] = []

        logger.info(f"Long text translation: {len(segments)} segments")

        for position, segment in enumerate(segments, start=1):
            logger.info(f"Translating segment {position}/{len(segments)}")
            result = await self.translate_text(segment, source_lang, target_lang)

            if result.success:
                translations.append(result.translation or "")
            else:
                logger.error(f"Segment {position} failed, keeping original: {result.error}")
                translations.append(segment)

            if position < len(segments) and self.segment_delay:
                await asyncio.sleep(self.segment_delay)

        return TranslationResult(
            success=True,
            translation="".join(translations),
            source_lang=source_lang,
            target_lang=target_lang,
            segments=len(segments),
        )

    async def batch_translate(
        self,
        texts: list[str],
        source_lang: str = "auto",
        target_lang: str = "zh-tw",
    ) -> BatchResult:
        """
        Translate up to max_batch_size texts in one service call.

        Never raises; request failures come back as success=False.
        """
        if not texts:
            return BatchResult(success=False, error="Texts array is empty")

        if len(texts) > self.max_batch_size:
            return BatchResult(
                success=False,
                error=f"At most {self.max_batch_size} texts can be translated per batch",
            )

        payload = {
            "texts": texts,
            "source_lang": source_lang,
            "target_lang": target_lang,
            "model": self.model,
        }

        try:
            data = await self._post("/translate/batch", payload, self.timeout * 2)
        except TranslatorClientError as e:
            logger.error(f"Batch translation failed: {e}")
            return BatchResult(success=False, error=str(e))

        results = [
            BatchItemResult(
                index=item.get("index", position),
                success=bool(item.get("success")),
                translation=item.get("translation", ""),
                error=item.get("error"),
                from_cache=bool(item.get("from_cache")),
                model=item.get("model"),
                stats=item.get("stats"),
            )
            for position, item in enumerate(data.get("results", []))
        ]

        logger.info(
            f"Batch translation done: {data.get('total_texts')} texts in {data.get('processing_time')}ms"
        )
        return BatchResult(
            success=True,
            results=results,
            total_texts=data.get("total_texts", len(texts)),
            processing_time=data.get("processing_time", 0),
        )

    async def translate_document(self, document: Document, target_lang: str = "zh-tw") -> DocumentTranslation:
        """
        Translate eligible text nodes and overlay bilingual blocks in place.

        Candidates are sent in batches of at most max_batch_size. Nodes
        without a successful result stay untouched.
        """
        candidates = []
        for node in document.text_nodes():
            original = node.text.strip()
            if original and should_translate(original):
                candidates.append((node, original))

        if not candidates:
            return DocumentTranslation(success=True)

        logger.info(f"Document translation: {len(candidates)} candidate text nodes")
        start_time = time.perf_counter()
        translated = 0

        for chunk_start in range(0, len(candidates), self.max_batch_size):
            chunk = candidates[chunk_start:chunk_start + self.max_batch_size]
            batch = await self.batch_translate([original for _, original in chunk], "auto", target_lang)

            if not batch.success:
                return DocumentTranslation(
                    success=False,
                    translated_count=translated,
                    total_candidates=len(candidates),
                    processing_time=int((time.perf_counter() - start_time) * 1000),
                    error=batch.error,
                )

            by_index = {item.index: item for item in batch.results}
            for offset, (node, original) in enumerate(chunk):
                item = by_index.get(offset)
                if item is not None and item.success:
                    document.replace_with_bilingual(node, original, item.translation)
                    translated += 1

        return DocumentTranslation(
            success=True,
            translated_count=translated,
            total_candidates=len(candidates),
            processing_time=int((time.perf_counter() - start_time) * 1000),
        )
