"""
Translation proxy FastAPI application.

Main application entry point with route registration and lifecycle management.
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from localtranslate import __version__
from localtranslate.api.routers import cache, health, translate
from localtranslate.core.config import settings
from localtranslate.core.logging import get_logger
from localtranslate.core.middleware import (
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
)
from localtranslate.services.ollama_client import OllamaClient
from localtranslate.services.translation_cache import TranslationCache
from localtranslate.services.translation_service import TranslationService

logger = get_logger(__name__)


# =============================================================================
# Application Lifecycle
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Owns the translation cache, its expiry sweeper and the Ollama client
    for the lifetime of the process.
    """
    logger.info("Starting translation service...")

    translation_cache = TranslationCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_keys=settings.cache_max_keys,
    )
    ollama = OllamaClient()
    app.state.translation_cache = translation_cache
    app.state.translation_service = TranslationService(ollama=ollama, cache=translation_cache)

    sweeper = asyncio.create_task(translation_cache.run_sweeper(settings.cache_check_period))

    logger.info(f"Ollama endpoint: {ollama.base_url}")
    logger.info(f"Cache enabled, TTL: {settings.cache_ttl_seconds}s")

    yield

    logger.info("Shutting down translation service...")
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    translation_cache.clear()
    logger.info("Application shutdown complete")


# =============================================================================
# Application Instance
# =============================================================================

app = FastAPI(
    title="Local AI Translator API",
    description="Web page translation proxy for a locally hosted Ollama model",
    version=__version__,
    docs_url="/docs" if settings.enable_swagger_ui else None,
    redoc_url="/redoc" if settings.enable_swagger_ui else None,
    lifespan=lifespan,
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    BodySizeLimitMiddleware,
    max_bytes=settings.max_body_size_mb * 1024 * 1024,
)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
    path_prefix=f"{settings.api_prefix}/",
)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies as 400 with the first problem found."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    else:
        message = "Invalid request"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors, including unmatched routes, in the API error shape."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Logs the traceback and returns a generic error without internals.
    """
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={"path": request.url.path, "method": request.method},
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


# =============================================================================
# Route Registration
# =============================================================================

# Health check endpoints
app.include_router(health.router)

# Translation endpoints
app.include_router(translate.router)

# Cache management endpoints
app.include_router(cache.router)


# =============================================================================
# Development Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "localtranslate.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.auto_reload,
        log_level=settings.log_level.lower(),
    )
