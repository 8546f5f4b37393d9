"""Configuration for logging."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(default="text", description="Log format (json or text)")
    include_correlation_id: bool = Field(default=True, description="Emit correlation IDs")
    logger_name: str = Field(default="fluentmask", description="Logger the handler is attached to")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _VALID_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Valid levels: {sorted(_VALID_LEVELS)}")
        return level

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"json", "text"}:
            raise ValueError(f"Invalid log format '{v}'. Valid formats: ['json', 'text']")
        return fmt

    @classmethod
    def from_file(cls, config_path: Path | str) -> LoggingConfig:
        """Load configuration from the ``logging`` section of a YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data.get("logging", {}))

    @classmethod
    def from_environment(cls) -> LoggingConfig:
        """Load configuration from ``FLUENTMASK_LOG_*`` environment variables."""
        defaults = cls()
        return cls(
            level=os.getenv("FLUENTMASK_LOG_LEVEL", defaults.level),
            format=os.getenv("FLUENTMASK_LOG_FORMAT", defaults.format),
            include_correlation_id=os.getenv("FLUENTMASK_LOG_CORRELATION", "true").lower() == "true",
        )
