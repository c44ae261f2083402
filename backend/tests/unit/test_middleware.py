"""
Tests for the rate limit, body size and request id middleware.
"""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from localtranslate.core.middleware import (
    RATE_LIMIT_MESSAGE,
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
)


def _app(**rate_limit) -> FastAPI:
    app = FastAPI()
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=64)
    app.add_middleware(RateLimitMiddleware, **rate_limit)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.post("/api/echo")
    async def echo(payload: dict):
        return payload

    @app.get("/other")
    async def other():
        return {"ok": True}

    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(_app(max_requests=2, window_seconds=60))


def test_rate_limit_rejects_after_quota(client):
    assert client.get("/api/ping").status_code == 200
    assert client.get("/api/ping").status_code == 200

    response = client.get("/api/ping")

    assert response.status_code == 429
    assert response.json() == {"success": False, "error": RATE_LIMIT_MESSAGE}


def test_rate_limit_only_counts_api_paths(client):
    for _ in range(5):
        assert client.get("/other").status_code == 200
    assert client.get("/api/ping").status_code == 200


def test_rate_limit_is_per_client(client):
    client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.1"})
    client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.1"})

    blocked = client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.1"})
    other = client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"})

    assert blocked.status_code == 429
    assert other.status_code == 200


def test_window_rolls_forward():
    limiter = RateLimitMiddleware(_app(), max_requests=2, window_seconds=60)

    assert limiter.allow("client", now=0)
    assert limiter.allow("client", now=30)
    assert not limiter.allow("client", now=59)
    # the first request leaves the window at t=60
    assert limiter.allow("client", now=60)
    assert not limiter.allow("client", now=61)


def test_limiter_evicts_least_recent_clients():
    limiter = RateLimitMiddleware(_app(), max_requests=5, window_seconds=60, max_clients=2)

    limiter.allow("a", now=1)
    limiter.allow("b", now=2)
    limiter.allow("c", now=3)

    assert set(limiter._history) == {"b", "c"}


def test_body_size_limit(client):
    small = client.post("/api/echo", json={"text": "hi"})
    large = client.post("/api/echo", json={"text": "x" * 200})

    assert small.status_code == 200
    assert large.status_code == 413
    assert large.json()["success"] is False


def _chunks(body: bytes, size: int = 16):
    for start in range(0, len(body), size):
        yield body[start:start + size]


def test_chunked_body_over_limit_is_rejected(client):
    body = b'{"text": "' + b"x" * 5000 + b'"}'

    response = client.post(
        "/api/echo",
        content=_chunks(body),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 413


def test_chunked_body_under_limit_passes(client):
    response = client.post(
        "/api/echo",
        content=_chunks(b'{"text": "hi"}', size=4),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200
    assert response.json() == {"text": "hi"}


def test_invalid_content_length_is_400():
    app = _app()
    middleware = BodySizeLimitMiddleware(app, max_bytes=64)
    sent = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        sent.append(message)

    scope = {"type": "http", "method": "POST", "path": "/api/echo", "headers": [(b"content-length", b"abc")]}
    asyncio.run(middleware(scope, receive, send))

    assert sent[0]["status"] == 400


def test_request_id_header(client):
    echoed = client.get("/other", headers={"X-Request-ID": "abc123"})
    generated = client.get("/other")

    assert echoed.headers["X-Request-ID"] == "abc123"
    assert len(generated.headers["X-Request-ID"]) == 32
