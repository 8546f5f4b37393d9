"""Format registry mapping format names and file extensions to serializers."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Any, Callable

from .serialization import JsonSerializer, Serializer, YamlSerializer

logger = logging.getLogger(__name__)


class SupportedFormat(Enum):
    """Supported payload formats."""

    JSON = "json"
    YAML = "yaml"
    JSONL = "jsonl"

    @classmethod
    def from_string(cls, value: str) -> SupportedFormat | None:
        """Create SupportedFormat from string value (``yml`` is accepted)."""
        lowered = value.strip().lower()
        if lowered == "yml":
            return cls.YAML
        for fmt in cls:
            if fmt.value == lowered:
                return fmt
        return None


_EXTENSIONS: dict[SupportedFormat, list[str]] = {
    SupportedFormat.JSON: [".json"],
    SupportedFormat.YAML: [".yaml", ".yml"],
    SupportedFormat.JSONL: [".jsonl", ".ndjson"],
}


class FormatRegistry:
    """Registry of serializer factories keyed by format name.

    JSON Lines records are serialized one per line with the JSON serializer,
    so ``jsonl`` resolves to compact JSON.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._factories: dict[str, Callable[..., Serializer]] = {
            SupportedFormat.JSON.value: JsonSerializer,
            SupportedFormat.YAML.value: YamlSerializer,
            SupportedFormat.JSONL.value: JsonSerializer,
        }

    def register(self, format_name: str, factory: Callable[..., Serializer]) -> None:
        """Register a serializer factory under ``format_name``."""
        with self._lock:
            self._factories[format_name.lower()] = factory
        logger.debug(f"Registered serializer for format '{format_name}'")

    def list_supported_formats(self) -> list[str]:
        return list(self._factories)

    def is_supported(self, format_name: str) -> bool:
        return format_name.lower() in self._factories or format_name.lower() == "yml"

    def get_serializer(self, format_name: str, **options: Any) -> Serializer:
        """Return a serializer instance for ``format_name``.

        Options such as ``indent`` are only passed to JSON serializers.

        Raises:
            ValueError: If the format is not registered
        """
        fmt = SupportedFormat.from_string(format_name)
        key = fmt.value if fmt else format_name.lower()
        factory = self._factories.get(key)
        if factory is None:
            raise ValueError(
                f"Unsupported format '{format_name}'. Supported: {', '.join(self.list_supported_formats())}"
            )
        if factory is JsonSerializer:
            return JsonSerializer(**options)
        return factory()

    def get_format_extensions(self, format_name: str) -> list[str]:
        fmt = SupportedFormat.from_string(format_name)
        return list(_EXTENSIONS.get(fmt, [])) if fmt else []

    def detect_format_from_path(self, path: Path) -> SupportedFormat | None:
        """Detect format from file extension."""
        ext = path.suffix.lower()
        for fmt, extensions in _EXTENSIONS.items():
            if ext in extensions:
                return fmt
        return None


_default_registry = FormatRegistry()


def get_format_registry() -> FormatRegistry:
    return _default_registry
