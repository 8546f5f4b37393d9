"""Engine defaults, optionally read from environment variables.

A process-wide default :class:`MaskingConfig` is consulted by maskers and
pattern rules whenever the caller does not pass explicit values.
"""

import logging
import os
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from .types import PropertyRuleBehavior

logger = logging.getLogger(__name__)

_VALID_FORMATS = {"json", "yaml"}


@dataclass
class MaskingConfig:
    """Default settings for maskers and rules.

    Attributes:
        default_behavior: Behavior used by maskers that never call
            ``set_property_rule_behavior``
        regex_timeout_ms: Execution timeout for pattern-matching rules
        output_format: Serializer used for ``MaskingResult.masked_data``
        json_indent: Indentation for JSON payloads (None for compact)
        convert_types: Whether string rules may be applied to non-string
            values through the type converter registry
    """

    default_behavior: PropertyRuleBehavior = PropertyRuleBehavior.EXCLUDE
    regex_timeout_ms: float = 100.0
    output_format: str = "json"
    json_indent: Optional[int] = None
    convert_types: bool = True

    def __post_init__(self) -> None:
        self._validate_behavior()
        self._validate_timeout()
        self._validate_output_format()
        self._validate_indent()

        logger.debug(
            f"MaskingConfig initialized: behavior={self.default_behavior.value}, "
            f"regex_timeout_ms={self.regex_timeout_ms}, format={self.output_format}"
        )

    def _validate_behavior(self) -> None:
        try:
            self.default_behavior = PropertyRuleBehavior.from_string(self.default_behavior)
        except ValueError:
            logger.warning(f"Invalid default_behavior '{self.default_behavior}', using 'exclude'")
            self.default_behavior = PropertyRuleBehavior.EXCLUDE

    def _validate_timeout(self) -> None:
        if (
            isinstance(self.regex_timeout_ms, bool)
            or not isinstance(self.regex_timeout_ms, (int, float))
            or self.regex_timeout_ms <= 0
        ):
            logger.warning(
                f"regex_timeout_ms must be a positive number, got {self.regex_timeout_ms!r}, using 100"
            )
            self.regex_timeout_ms = 100.0

    def _validate_output_format(self) -> None:
        self.output_format = str(self.output_format).lower()
        if self.output_format not in _VALID_FORMATS:
            logger.warning(
                f"Invalid output_format '{self.output_format}', using 'json'. Valid: {sorted(_VALID_FORMATS)}"
            )
            self.output_format = "json"

    def _validate_indent(self) -> None:
        if self.json_indent is not None and (
            not isinstance(self.json_indent, int) or self.json_indent < 0
        ):
            logger.warning(f"json_indent must be a non-negative integer or None, got {self.json_indent!r}")
            self.json_indent = None

    @classmethod
    def from_environment(cls) -> "MaskingConfig":
        """Load configuration from environment variables.

        Environment Variables:
            FLUENTMASK_DEFAULT_BEHAVIOR: include|exclude|remove
            FLUENTMASK_REGEX_TIMEOUT_MS: Pattern timeout in milliseconds
            FLUENTMASK_OUTPUT_FORMAT: json|yaml
            FLUENTMASK_JSON_INDENT: Non-negative integer
            FLUENTMASK_CONVERT_TYPES: true|false

        Invalid values log a warning and fall back to defaults.
        """
        behavior = cls._get_env_string("FLUENTMASK_DEFAULT_BEHAVIOR", "exclude")
        timeout = cls._get_env_float("FLUENTMASK_REGEX_TIMEOUT_MS", 100.0)
        output_format = cls._get_env_string("FLUENTMASK_OUTPUT_FORMAT", "json")
        indent = cls._get_env_int("FLUENTMASK_JSON_INDENT", None)
        convert = cls._get_env_bool("FLUENTMASK_CONVERT_TYPES", True)

        config = cls(
            default_behavior=behavior,  # type: ignore[arg-type]
            regex_timeout_ms=timeout,
            output_format=output_format,
            json_indent=indent,
            convert_types=convert,
        )
        logger.info(f"Loaded masking configuration from environment: {config}")
        return config

    @staticmethod
    def _get_env_string(key: str, default: str) -> str:
        value = os.getenv(key)
        if value is None:
            return default
        return value.strip()

    @staticmethod
    def _get_env_bool(key: str, default: bool) -> bool:
        """Only 'true'/'false' (case insensitive) override the default."""
        value = os.getenv(key)
        if value is None:
            return default
        cleaned = value.strip().lower()
        if cleaned == "true":
            return True
        if cleaned == "false":
            return False
        return default

    @staticmethod
    def _get_env_int(key: str, default: Optional[int]) -> Optional[int]:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError:
            logger.warning(f"Invalid integer value for {key}: '{value}', using default {default}")
            return default

    @staticmethod
    def _get_env_float(key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value.strip())
        except ValueError:
            logger.warning(f"Invalid numeric value for {key}: '{value}', using default {default}")
            return default


_config_lock = Lock()
_default_config: Optional[MaskingConfig] = None


def get_default_config() -> MaskingConfig:
    """Return the process default, loading it from the environment on first use."""
    global _default_config
    if _default_config is None:
        with _config_lock:
            if _default_config is None:
                _default_config = MaskingConfig.from_environment()
    return _default_config


def set_default_config(config: Optional[MaskingConfig]) -> None:
    """Replace the process default. ``None`` reloads from the environment on next use."""
    global _default_config
    with _config_lock:
        _default_config = config
