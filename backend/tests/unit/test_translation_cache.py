"""
Tests for the TTL translation cache.
"""

import asyncio

import pytest

from localtranslate.models import TranslationResult
from localtranslate.services.translation_cache import CacheFullError, TranslationCache


def _result(text: str) -> TranslationResult:
    return TranslationResult(success=True, translation=text, model="m")


def test_set_then_get(clock):
    cache = TranslationCache(ttl_seconds=60, clock=clock)
    cache.set("k", _result("你好"))

    assert cache.get("k").translation == "你好"


def test_entry_expires_after_ttl_regardless_of_reads(clock):
    cache = TranslationCache(ttl_seconds=60, clock=clock)
    cache.set("k", _result("你好"))

    clock.advance(59)
    assert cache.get("k") is not None

    clock.advance(1)
    assert cache.get("k") is None


def test_stats_count_hits_and_misses(clock):
    cache = TranslationCache(ttl_seconds=60, clock=clock)
    cache.set("key", _result("abc"))
    cache.get("key")
    cache.get("missing")

    stats = cache.get_stats()

    assert stats == {"hits": 1, "misses": 1, "keys": 1, "ksize": 3, "vsize": 3}


def test_sweep_removes_only_expired(clock):
    cache = TranslationCache(ttl_seconds=60, clock=clock)
    cache.set("old", _result("1"))
    clock.advance(30)
    cache.set("new", _result("2"))
    clock.advance(31)

    assert cache.sweep() == 1
    assert cache.keys() == ["new"]


def test_capacity_limit(clock):
    cache = TranslationCache(ttl_seconds=60, max_keys=2, clock=clock)
    cache.set("a", _result("1"))
    cache.set("b", _result("2"))

    # Overwriting an existing key is always allowed
    cache.set("a", _result("3"))

    with pytest.raises(CacheFullError):
        cache.set("c", _result("4"))

    # Expired entries free capacity
    clock.advance(61)
    cache.set("c", _result("4"))
    assert cache.keys() == ["c"]


def test_clear_resets_everything(clock):
    cache = TranslationCache(ttl_seconds=60, clock=clock)
    cache.set("a", _result("1"))
    cache.get("a")

    assert cache.clear() == 1
    assert len(cache) == 0
    assert cache.get_stats()["hits"] == 0


def test_make_key_uses_full_text():
    prefix = "x" * 100
    first = TranslationCache.make_key("m", "auto", "zh-tw", prefix + "one")
    second = TranslationCache.make_key("m", "auto", "zh-tw", prefix + "two")

    assert first != second
    assert first == TranslationCache.make_key("m", "auto", "zh-tw", prefix + "one")


def test_make_key_separates_languages_and_models():
    base = TranslationCache.make_key("m", "auto", "zh-tw", "Hello")

    assert base != TranslationCache.make_key("m", "auto", "zh-cn", "Hello")
    assert base != TranslationCache.make_key("m", "en", "zh-tw", "Hello")
    assert base != TranslationCache.make_key("other", "auto", "zh-tw", "Hello")


@pytest.mark.asyncio
async def test_sweeper_runs_until_cancelled(clock):
    cache = TranslationCache(ttl_seconds=1, clock=clock)
    cache.set("a", _result("1"))
    clock.advance(2)

    task = asyncio.create_task(cache.run_sweeper(0.01))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert cache._entries == {}
