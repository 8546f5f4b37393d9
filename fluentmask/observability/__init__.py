"""fluentmask logging integration."""

from .config import LoggingConfig
from .log_filter import MaskingLogFilter
from .logging import JsonFormatter, configure_logging, correlation_context, get_logger

__all__ = [
    "LoggingConfig",
    "MaskingLogFilter",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "get_logger",
]
