"""
Ollama API client for text generation and model discovery.

Handles communication with the Ollama server that performs the translations.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from localtranslate.core.config import settings
from localtranslate.core.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class OllamaError(Exception):
    """Base exception for Ollama client errors."""

    pass


class OllamaConnectionError(OllamaError):
    """Connection failure or timeout."""

    pass


class OllamaResponseError(OllamaError):
    """Non-success status or malformed response body."""

    pass


# =============================================================================
# Response Types
# =============================================================================


@dataclass
class OllamaGeneration:
    """Completion text plus the timing/usage metadata Ollama reports."""

    text: str
    model: str
    total_duration: int | None = None
    load_duration: int | None = None
    prompt_eval_count: int | None = None
    eval_count: int | None = None

    @property
    def stats(self) -> dict[str, int | None]:
        return {
            "total_duration": self.total_duration,
            "load_duration": self.load_duration,
            "prompt_eval_count": self.prompt_eval_count,
            "eval_count": self.eval_count,
        }


# =============================================================================
# Ollama Client
# =============================================================================


class OllamaClient:
    """
    Client for interacting with Ollama API.

    Provides methods for:
    - Listing available models (used for health probing)
    - Generating text (translation)
    - Checking model availability
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        health_timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama API base URL (defaults to settings)
            timeout: Generation timeout in seconds (defaults to settings)
            health_timeout: Model listing timeout in seconds (defaults to settings)
            transport: Optional httpx transport, used to stub the server in tests
        """
        self.base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self.timeout = timeout or settings.ollama_timeout
        self.health_timeout = health_timeout or settings.ollama_health_timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def _request(self, method: str, path: str, timeout: float, **kwargs: Any) -> dict:
        """
        Send a request to Ollama and decode the JSON body.

        Raises:
            OllamaConnectionError: Connection failures and timeouts
            OllamaResponseError: Non-2xx responses and undecodable bodies
        """
        url = f"{self.base_url}{path}"
        try:
            async with self._client(timeout) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise OllamaConnectionError(f"Request timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise OllamaConnectionError(f"Connection failed: {e}") from e

        if response.status_code >= 400:
            raise OllamaResponseError(f"HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise OllamaResponseError(f"Invalid JSON response from {path}") from e

        if not isinstance(data, dict):
            raise OllamaResponseError(f"Expected a JSON object from {path}, got {type(data).__name__}")
        return data

    async def list_models(self) -> list[dict]:
        """
        List all locally available models.

        Returns:
            list[dict]: List of model information dictionaries

        Raises:
            OllamaError: If the request fails
        """
        try:
            data = await self._request("GET", "/api/tags", timeout=self.health_timeout)
        except OllamaError as e:
            logger.error(f"Failed to list models: {e}")
            raise
        models = data.get("models") or []
        if not isinstance(models, list):
            raise OllamaResponseError("Model listing is not a list")
        return models

    async def generate(
        self,
        model: str,
        prompt: str,
        temperature: float | None = None,
        stop: list[str] | None = None,
        options: dict[str, Any] | None = None,
    ) -> OllamaGeneration:
        """
        Generate a completion for a prompt.

        Args:
            model: Model name to use
            prompt: Full prompt text
            temperature: Sampling temperature (defaults to settings)
            stop: Stop sequences that end generation
            options: Extra Ollama sampling options

        Returns:
            OllamaGeneration: Completion text with timing metadata

        Raises:
            OllamaError: If the request fails
        """
        payload_options: dict[str, Any] = {
            "temperature": settings.mt_temperature if temperature is None else temperature,
        }
        if options:
            payload_options.update(options)
        if stop:
            payload_options["stop"] = stop

        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": payload_options,
        }

        try:
            data = await self._request("POST", "/api/generate", timeout=self.timeout, json=payload)
        except OllamaError as e:
            logger.error(f"Generation failed: {e}")
            raise

        text = data.get("response", "")
        if not isinstance(text, str):
            raise OllamaResponseError(f"Generation response is not text: {type(text).__name__}")

        return OllamaGeneration(
            text=text,
            model=model,
            total_duration=data.get("total_duration"),
            load_duration=data.get("load_duration"),
            prompt_eval_count=data.get("prompt_eval_count"),
            eval_count=data.get("eval_count"),
        )
