"""
HTTP middleware protecting the translation API.

- Per-client rolling-window rate limiting
- Request body size cap
- Request id propagation into logs and response headers
"""

import logging
import time
import uuid
from collections import deque

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from localtranslate.core.logging import get_logger, log_with_context, set_request_id

logger = get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later"


def get_client_id(request: Request) -> str:
    """Identify the caller by its first forwarded address or socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Allow at most max_requests per client within any window_seconds span.

    Only paths under path_prefix are counted. State is process-local.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: float = 60,
        path_prefix: str = "/api/",
        max_clients: int = 10000,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix
        self.max_clients = max_clients
        # client id -> timestamps of accepted requests inside the window
        self._history: dict[str, deque[float]] = {}

    def _evict_if_needed(self) -> None:
        if len(self._history) <= self.max_clients:
            return
        # Drop the clients seen least recently
        overflow = len(self._history) - self.max_clients
        stale = sorted(self._history.items(), key=lambda item: item[1][-1] if item[1] else 0.0)
        for client_id, _ in stale[:overflow]:
            self._history.pop(client_id, None)

    def allow(self, client_id: str, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        timestamps = self._history.setdefault(client_id, deque())

        cutoff = now - self.window_seconds
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            return False

        timestamps.append(now)
        self._evict_if_needed()
        return True

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.path_prefix):
            client_id = get_client_id(request)
            if not self.allow(client_id):
                log_with_context(
                    logger,
                    logging.WARNING,
                    "Rate limit exceeded",
                    client_id=client_id,
                    path=request.url.path,
                )
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content={"success": False, "error": RATE_LIMIT_MESSAGE},
                )
        return await call_next(request)


class BodySizeLimitMiddleware:
    """
    Cap request bodies at max_bytes.

    A declared Content-Length is checked before the app runs. Bodies sent
    without one (chunked uploads) are counted as they stream, and reading
    past the cap fails the request with 413.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes
        self.message = f"Request body too large, maximum is {max_bytes} bytes"

    def _too_large(self) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"success": False, "error": self.message},
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                response = JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"success": False, "error": "Invalid Content-Length header"},
                )
                await response(scope, receive, send)
                return
            if size > self.max_bytes:
                await self._too_large()(scope, receive, send)
                return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=self.message)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except StarletteHTTPException as exc:
            # Raised from limited_receive outside a route that handles it
            if exc.status_code != status.HTTP_413_REQUEST_ENTITY_TOO_LARGE or response_started:
                raise
            logger.warning(f"Rejected streamed request body over {self.max_bytes} bytes")
            await self._too_large()(scope, receive, send)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id for log correlation."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            set_request_id(None)
        response.headers["X-Request-ID"] = request_id
        return response
