"""
Logging setup for the translation service.

Records carry the id of the HTTP request they were emitted under, and any
structured fields passed through log_with_context() or ``extra=``. Output
is one JSON object per line, or a compact text line for local development.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from localtranslate.core.config import settings

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else was passed via extra=
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "request_id", "request_tag", "context"}


class RequestContextFilter(logging.Filter):
    """Stamp each record with the current request id (or None)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }
    fields.update(getattr(record, "context", None) or {})
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per record, non-ASCII text kept readable."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id

        entry.update(_structured_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """
    Single-line text output.

    Structured fields are appended as key=value pairs after the message.
    """

    def __init__(self):
        super().__init__(fmt="%(asctime)s %(levelname)-8s %(name)s%(request_tag)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, "request_id", None)
        record.request_tag = f" [req={request_id[:8]}]" if request_id else ""

        line = super().format(record)
        fields = _structured_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def _handlers(output: str, log_file: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "both"):
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    return handlers


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    output: str | None = None,
) -> None:
    """
    Install handlers on the root logger.

    Arguments override the LOG_LEVEL / LOG_FORMAT / LOG_OUTPUT settings.
    Calling it again replaces the previous handlers.
    """
    level = level or settings.log_level
    fmt = fmt or settings.log_format
    output = output or settings.log_output

    formatter = JSONFormatter() if fmt == "json" else TextFormatter()
    context_filter = RequestContextFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    for handler in _handlers(output, settings.log_file):
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log a message with structured fields.

    Example:
        log_with_context(logger, logging.INFO, "Translation done", model="qwen2:7b-instruct")
    """
    logger.log(level, message, extra={"context": context})


def set_request_id(request_id: str | None) -> None:
    request_id_var.set(request_id)


configure_logging()
