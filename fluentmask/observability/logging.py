"""Structured logging with correlation IDs."""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import uuid
from collections.abc import Generator, MutableMapping
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import IO, Any, Optional

from .config import LoggingConfig

# Context variable for correlation IDs
correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id", default="")

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "taskName",
        "correlation_id",
    }
)

_HANDLER_NAME = "fluentmask-handler"


class JsonFormatter(logging.Formatter):
    """JSON formatter for standard logging."""

    def __init__(self, include_correlation_id: bool = True):
        super().__init__()
        self.include_correlation_id = include_correlation_id

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_correlation_id:
            corr_id = getattr(record, "correlation_id", None) or correlation_id.get()
            if corr_id:
                log_data["correlation_id"] = corr_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def configure_logging(config: Optional[LoggingConfig] = None, stream: Optional[IO[str]] = None) -> logging.Handler:
    """Attach a single handler to the package logger.

    Calling this again replaces the previously installed handler.

    Returns:
        The installed handler
    """
    config = config or LoggingConfig.from_environment()

    if config.format == "json":
        formatter: logging.Formatter = JsonFormatter(config.include_correlation_id)
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    logger = logging.getLogger(config.logger_name)
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(config.level)
    return handler


class CorrelationAdapter(logging.LoggerAdapter):
    """Adds the current correlation ID to every record as ``extra``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        corr_id = correlation_id.get()
        if corr_id:
            extra = dict(kwargs.get("extra") or {})
            extra.setdefault("correlation_id", corr_id)
            kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> CorrelationAdapter:
    """Get a logger that carries the active correlation ID."""
    return CorrelationAdapter(logging.getLogger(name), {})


@contextmanager
def correlation_context(corr_id: Optional[str] = None) -> Generator[str, None, None]:
    """Context manager for correlation ID."""
    if corr_id is None:
        corr_id = str(uuid.uuid4())

    token = correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        correlation_id.reset(token)
