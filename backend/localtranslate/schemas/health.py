"""
Health check schemas.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Overall health status: healthy | unhealthy")
    ollama_connected: bool = Field(description="Whether Ollama answered the model listing")
    models_available: int | None = Field(default=None, description="Number of local models")
    qwen2_available: bool | None = Field(default=None, description="Whether the preferred model family is installed")
    cache_keys: int | None = Field(default=None, description="Number of live cache entries")
    error: str | None = Field(default=None, description="Probe error when unhealthy")
    timestamp: str = Field(description="ISO 8601 timestamp")
