"""
Translation Cache

In-process translation store with a fixed time-to-live per entry.
"""

import asyncio
import hashlib
import json
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from localtranslate.core.logging import get_logger
from localtranslate.models import TranslationResult

logger = get_logger(__name__)


class CacheError(Exception):
    """Base exception for cache failures."""

    pass


class CacheFullError(CacheError):
    """Raised when a new key would exceed the configured capacity."""

    pass


@dataclass
class CacheEntry:
    value: TranslationResult
    expires_at: float


class TranslationCache:
    """
    Time-bounded key/value store for translation results.

    Entries expire a fixed TTL after they were written, regardless of how
    often they are read. All operations hold an internal lock, so callers
    may read and write from any task or thread without extra locking.
    """

    def __init__(
        self,
        ttl_seconds: int = 86400,
        max_keys: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of each entry in seconds
            max_keys: Maximum number of live keys (0 for unbounded)
            clock: Monotonic time source, replaceable in tests
        """
        self.ttl_seconds = ttl_seconds
        self.max_keys = max_keys
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(model: str, source_lang: str, target_lang: str, text: str) -> str:
        """
        Compute the cache key for a translation request.

        The full text is hashed, so distinct texts never share a key.
        """
        payload = json.dumps([model, source_lang, target_lang, text], ensure_ascii=False)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def get(self, key: str) -> TranslationResult | None:
        """
        Get a live entry.

        Returns:
            The cached result, or None when missing or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: TranslationResult) -> None:
        """
        Store a result under key, replacing any previous entry.

        Raises:
            CacheFullError: If the cache is at capacity and key is new
        """
        with self._lock:
            now = self._clock()
            if self.max_keys and key not in self._entries and len(self._entries) >= self.max_keys:
                self._purge_expired(now)
                if len(self._entries) >= self.max_keys:
                    raise CacheFullError(f"Cache max keys amount exceeded ({self.max_keys})")
            self._entries[key] = CacheEntry(value=value, expires_at=now + self.ttl_seconds)

    def clear(self) -> int:
        """
        Remove every entry and reset hit/miss counters.

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._hits = 0
            self._misses = 0
        logger.warning(f"Cleared ALL {count} cache entries")
        return count

    def keys(self) -> list[str]:
        """Keys of all live entries."""
        with self._lock:
            now = self._clock()
            return [key for key, entry in self._entries.items() if entry.expires_at > now]

    def __len__(self) -> int:
        return len(self.keys())

    def sweep(self) -> int:
        """
        Drop expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._purge_expired(self._clock())

    def _purge_expired(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def get_stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with hits, misses, live key count and approximate
            key/value sizes in characters
        """
        with self._lock:
            now = self._clock()
            live = {key: entry for key, entry in self._entries.items() if entry.expires_at > now}
            return {
                "hits": self._hits,
                "misses": self._misses,
                "keys": len(live),
                "ksize": sum(len(key) for key in live),
                "vsize": sum(len(entry.value.translation or "") for entry in live.values()),
            }

    async def run_sweeper(self, interval_seconds: float) -> None:
        """
        Sweep expired entries every interval until cancelled.

        Intended to run as a background task owned by the application.
        """
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.info(f"Cache sweep removed {removed} expired entries")
