"""
Pytest configuration for integration tests.

Provides an API client bound to a translation service wired to the fake
Ollama runtime.
"""

import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from localtranslate.api.deps import get_translation_service
from localtranslate.main import app
from localtranslate.services.translation_service import TranslationService


# =============================================================================
# FastAPI Client Fixtures
# =============================================================================

@pytest.fixture
def api_app(translation_service: TranslationService):
    """Application with the translation service dependency overridden."""
    app.dependency_overrides[get_translation_service] = lambda: translation_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app) -> Generator[TestClient, None, None]:
    """
    Test client for API requests.

    Each test gets its own forwarded address so rate limit windows never
    carry over between tests.
    """
    yield TestClient(
        api_app,
        raise_server_exceptions=False,
        headers={"X-Forwarded-For": f"10.{uuid.uuid4().int % 250}.{uuid.uuid4().int % 250}.1"},
    )
