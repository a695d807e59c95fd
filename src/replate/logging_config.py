"""Structured logging for the replate client.

Every request the transport sends runs inside a ``LoggingContext`` carrying a
short request id and the endpoint, so log lines from the transport and the
decoder can be correlated per request.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from replate import __version__
from replate.config import get_settings

PACKAGE_LOGGER = "replate"

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
endpoint_ctx: ContextVar[str | None] = ContextVar("endpoint", default=None)

_CONTEXT_VARS: dict[str, ContextVar] = {
    "request_id": request_id_ctx,
    "endpoint": endpoint_ctx,
}

# Libraries whose request logging duplicates the transport's own
_NOISY_LOGGERS = ("httpx", "httpcore")


def _current_context() -> dict[str, str]:
    return {name: value for name, var in _CONTEXT_VARS.items() if (value := var.get())}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StructuredJsonFormatter(logging.Formatter):
    """One JSON object per line, for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "client_version": __version__,
            **_current_context(),
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "extra_data", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry["source"] = f"{record.module}.{record.funcName}:{record.lineno}"
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Readable single-line format with the request context in brackets."""

    def format(self, record: logging.LogRecord) -> str:
        context = []
        if request_id := request_id_ctx.get():
            context.append(f"req={request_id[:8]}")
        if endpoint := endpoint_ctx.get():
            context.append(f"endpoint={endpoint}")
        tag = f" [{', '.join(context)}]" if context else ""

        line = (
            f"{_utc_now():%Y-%m-%d %H:%M:%S} | {record.levelname:<8} | "
            f"{record.name}{tag} | {record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ContextLogger(logging.LoggerAdapter):
    """Adds the current request context to every record's ``extra``."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**_current_context(), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Context-aware logger for a replate module."""
    return ContextLogger(logging.getLogger(name), {})


def configure_logging(
    log_level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """
    Attach handlers to the ``replate`` logger.

    Only the package logger is configured, so an embedding application keeps
    control of the root logger.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to Settings.log_level.
        json_format: Use JSON format for logs. If None, JSON is used outside
            development when stdout is not a terminal, or when LOG_FORMAT=json.
        log_file: Optional file path to also write logs to.
    """
    settings = get_settings()
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "").lower() == "json" or (
            not settings.is_development and not sys.stdout.isatty()
        )

    level_name = (log_level or settings.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    formatter = StructuredJsonFormatter() if json_format else ContextualFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).info(
        f"Logging configured: level={level_name}, format={'json' if json_format else 'text'}"
    )


class LoggingContext:
    """Binds request id and endpoint for the duration of a ``with`` block."""

    def __init__(self, request_id: str | None = None, endpoint: str | None = None):
        self._values = {"request_id": request_id, "endpoint": endpoint}
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContext":
        for name, value in self._values.items():
            if value is not None:
                self._tokens[name] = _CONTEXT_VARS[name].set(value)
        return self

    def __exit__(self, *args: Any) -> None:
        while self._tokens:
            name, token = self._tokens.popitem()
            _CONTEXT_VARS[name].reset(token)
