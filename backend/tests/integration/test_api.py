"""
Integration tests for the HTTP API.

Requests go through the full middleware stack and routers into a
translation service backed by the fake Ollama runtime.
"""

import pytest
from fastapi.testclient import TestClient

from localtranslate.api.deps import get_translation_service
from localtranslate.services.prompts import SUPPORTED_LANGUAGES


class TestHealth:
    def test_healthy(self, client: TestClient):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["ollama_connected"] is True
        assert data["models_available"] == 2
        assert data["qwen2_available"] is True
        assert data["cache_keys"] == 0
        assert "timestamp" in data

    def test_unhealthy_returns_503(self, client: TestClient, fake_ollama):
        fake_ollama.tags_status = 500

        response = client.get("/api/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["ollama_connected"] is False
        assert "HTTP 500" in data["error"]


class TestTranslate:
    def test_translate_then_serve_from_cache(self, client: TestClient, fake_ollama):
        fake_ollama.translations["Good morning"] = "早安"
        body = {"text": "Good morning", "target_lang": "zh-tw"}

        first = client.post("/api/translate", json=body)
        second = client.post("/api/translate", json=body)

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["translation"] == "早安"
        assert first.json()["from_cache"] is False
        assert first.json()["model"] == "qwen2:7b-instruct"
        assert first.json()["stats"]["total_duration"] == 1200
        assert second.json()["from_cache"] is True
        assert len(fake_ollama.generate_calls) == 1

    def test_cache_is_keyed_by_target_language(self, client: TestClient, fake_ollama):
        client.post("/api/translate", json={"text": "Hello", "target_lang": "zh-tw"})
        response = client.post("/api/translate", json={"text": "Hello", "target_lang": "ja"})

        assert response.json()["from_cache"] is False
        assert len(fake_ollama.generate_calls) == 2
        assert "日本語" in fake_ollama.generate_calls[1]["prompt"]

    @pytest.mark.parametrize(
        "body",
        [{}, {"text": ""}, {"text": "   "}, {"text": "x" * 10001}],
    )
    def test_invalid_text_is_400(self, client: TestClient, fake_ollama, body):
        response = client.post("/api/translate", json=body)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert fake_ollama.generate_calls == []

    def test_malformed_body_is_400(self, client: TestClient):
        response = client.post("/api/translate", json={"text": ["not", "a", "string"]})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"].startswith("Invalid request")

    def test_runtime_failure_is_500(self, client: TestClient, fake_ollama):
        fake_ollama.fail_texts.add("Hello")

        response = client.post("/api/translate", json={"text": "Hello"})

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"].startswith("Translation failed")

    def test_unexpected_error_is_generic_500(self, client: TestClient, api_app):
        class ExplodingService:
            async def translate(self, *args, **kwargs):
                raise RuntimeError("secret internals")

        api_app.dependency_overrides[get_translation_service] = lambda: ExplodingService()

        response = client.post("/api/translate", json={"text": "Hello"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}


class TestBatch:
    def test_batch_keeps_order_and_isolates_failures(self, client: TestClient, fake_ollama):
        fake_ollama.translations.update({"one": "一", "three": "三"})
        fake_ollama.fail_texts.add("two")

        response = client.post("/api/translate/batch", json={"texts": ["one", "two", "three"]})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_texts"] == 3
        assert isinstance(data["processing_time"], int)
        assert [item["index"] for item in data["results"]] == [0, 1, 2]
        assert [item["translation"] for item in data["results"]] == ["一", "two", "三"]
        assert data["results"][1]["success"] is False
        assert data["results"][1]["error"]

    @pytest.mark.parametrize("texts", [[], ["t"] * 51])
    def test_batch_size_is_validated(self, client: TestClient, fake_ollama, texts):
        response = client.post("/api/translate/batch", json={"texts": texts})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert fake_ollama.generate_calls == []

    def test_missing_texts_is_400(self, client: TestClient):
        response = client.post("/api/translate/batch", json={})

        assert response.status_code == 400


class TestLanguagesAndCache:
    def test_languages(self, client: TestClient):
        response = client.get("/api/languages")

        assert response.status_code == 200
        assert response.json() == {
            "supported_languages": SUPPORTED_LANGUAGES,
            "default_target": "zh-tw",
        }

    def test_cache_stats_and_clear(self, client: TestClient):
        client.post("/api/translate", json={"text": "Hello"})
        client.post("/api/translate", json={"text": "Hello"})

        stats = client.get("/api/cache/stats").json()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["keys"] == 1
        assert stats["keys_count"] == 1

        cleared = client.delete("/api/cache")
        assert cleared.status_code == 200
        assert cleared.json() == {"success": True, "message": "Cache cleared"}
        assert client.get("/api/cache/stats").json()["keys_count"] == 0


class TestErrors:
    def test_unknown_route(self, client: TestClient):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Route not found"}

    def test_request_id_is_returned(self, client: TestClient):
        response = client.get("/api/languages", headers={"X-Request-ID": "trace-1"})

        assert response.headers["X-Request-ID"] == "trace-1"
