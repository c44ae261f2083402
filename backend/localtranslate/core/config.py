"""
Application configuration using pydantic-settings.

Loads and validates environment variables from .env file or system environment.
"""

from typing import Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =============================================================================
    # API & Application
    # =============================================================================
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=3000)
    api_prefix: str = Field(default="/api")

    cors_origins: str = Field(default="http://localhost:3000")
    cors_origin_regex: str = Field(
        default=r"^(chrome-extension|moz-extension)://.*$|^http://localhost(:\d+)?$",
        description="Browser extension and local development origins",
    )

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, v: str) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    # =============================================================================
    # Ollama Configuration
    # =============================================================================
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama API base URL",
    )
    ollama_timeout: int = Field(default=30, description="Generation timeout in seconds")
    ollama_health_timeout: int = Field(default=5, description="Model listing probe timeout")
    default_mt_model: str = Field(default="qwen2:7b-instruct")
    health_model_family: str = Field(
        default="qwen2",
        description="Model name fragment reported as qwen2_available by /health",
    )

    # Generation options sent with every translation
    mt_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    mt_top_p: float = Field(default=0.9, ge=0.0, le=1.0)
    mt_top_k: int = Field(default=40)
    mt_repeat_penalty: float = Field(default=1.1)
    mt_num_predict: int = Field(default=-1, description="-1 leaves output length unbounded")

    # =============================================================================
    # Translation Pipeline
    # =============================================================================
    default_source_lang: str = Field(default="auto")
    default_target_lang: str = Field(default="zh-tw")
    max_text_length: int = Field(default=10000)
    max_batch_size: int = Field(default=50)
    batch_group_size: int = Field(default=5, ge=1)
    batch_group_delay: float = Field(default=0.1, ge=0.0, description="Pause between batch groups in seconds")

    # =============================================================================
    # Translation Cache
    # =============================================================================
    cache_ttl_seconds: int = Field(default=86400)
    cache_check_period: int = Field(default=3600, description="Expired entry sweep interval in seconds")
    cache_max_keys: int = Field(default=50000, description="0 disables the capacity limit")

    # =============================================================================
    # Request Limits
    # =============================================================================
    rate_limit_requests: int = Field(default=100)
    rate_limit_window_seconds: int = Field(default=60)
    max_body_size_mb: int = Field(default=10)

    # =============================================================================
    # Translator Client (browser-side counterpart)
    # =============================================================================
    translator_api_url: str = Field(default="http://localhost:3000/api")
    translator_timeout: float = Field(default=30.0)
    translator_max_attempts: int = Field(default=3, ge=1)
    translator_retry_backoff: float = Field(default=1.0, ge=0.0)
    translator_segment_length: int = Field(default=5000)
    translator_segment_delay: float = Field(default=0.5, ge=0.0)

    # =============================================================================
    # Logging Configuration
    # =============================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="json")
    log_output: Literal["stdout", "file", "both"] = Field(default="stdout")
    log_file: str = Field(default="logs/localtranslate.log")

    # =============================================================================
    # Development Settings
    # =============================================================================
    enable_swagger_ui: bool = Field(default=True)
    auto_reload: bool = Field(default=False)


# =============================================================================
# Singleton Settings Instance
# =============================================================================
settings = Settings()

