"""
Shared fixtures: a fake Ollama server and services wired to it.
"""

import asyncio
import json

import httpx
import pytest

from localtranslate.services.ollama_client import OllamaClient
from localtranslate.services.translation_cache import TranslationCache
from localtranslate.services.translation_service import TranslationService

OLLAMA_URL = "http://ollama.test"


class FakeOllama:
    """
    In-memory stand-in for the Ollama HTTP API.

    Translations are looked up by source text (extracted from the
    prompt); unknown texts are echoed back in brackets.
    """

    def __init__(self):
        self.translations: dict[str, str] = {}
        self.fail_texts: set[str] = set()
        self.timeout_texts: set[str] = set()
        self.delays: dict[str, float] = {}
        self.models = [{"name": "qwen2:7b-instruct"}, {"name": "llama3:8b"}]
        self.tags_status = 200
        self.generate_calls: list[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @staticmethod
    def source_text(prompt: str) -> str:
        for marker in ("原文：\n", "Original text:\n"):
            if marker in prompt:
                return prompt.split(marker, 1)[1].rsplit("\n\n", 1)[0]
        return prompt

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            if self.tags_status != 200:
                return httpx.Response(self.tags_status, text="unavailable")
            return httpx.Response(200, json={"models": self.models})

        if request.url.path == "/api/generate":
            payload = json.loads(request.content)
            self.generate_calls.append(payload)
            text = self.source_text(payload["prompt"])

            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                if text in self.delays:
                    await asyncio.sleep(self.delays[text])
            finally:
                self.in_flight -= 1

            if text in self.timeout_texts:
                raise httpx.ReadTimeout("timed out", request=request)
            if text in self.fail_texts:
                return httpx.Response(500, json={"error": "model crashed"})

            translation = self.translations.get(text, f"[{text}]")
            return httpx.Response(
                200,
                json={
                    "response": f"翻譯結果：{translation}\n",
                    "done": True,
                    "total_duration": 1200,
                    "load_duration": 100,
                    "prompt_eval_count": 20,
                    "eval_count": 8,
                },
            )

        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def ollama_client(fake_ollama: FakeOllama) -> OllamaClient:
    return OllamaClient(base_url=OLLAMA_URL, transport=httpx.MockTransport(fake_ollama.handler))


@pytest.fixture
def translation_cache() -> TranslationCache:
    return TranslationCache(ttl_seconds=86400)


@pytest.fixture
def translation_service(ollama_client: OllamaClient, translation_cache: TranslationCache) -> TranslationService:
    return TranslationService(ollama=ollama_client, cache=translation_cache, group_delay=0)
