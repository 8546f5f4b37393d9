"""Structure → text serializers for masked payloads.

Serializers receive the plain structure produced by the assembler (mappings,
lists and scalars). :func:`normalize` turns the remaining non-native scalars
(dates, decimals, enums, UUIDs, bytes, sets) into deterministic plain values
so the same structure always serializes to the same text.
"""

import base64
import json
import logging
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Optional, Protocol, runtime_checkable
from uuid import UUID

import yaml

from ..core.exceptions import SerializationError

logger = logging.getLogger(__name__)


def normalize_scalar(value: Any) -> Any:
    """Convert one non-native scalar to a plain, deterministic value."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return normalize_scalar(value.value)
    if isinstance(value, (UUID, PurePath)):
        return str(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


def normalize(value: Any) -> Any:
    """Recursively convert a structure to JSON/YAML-safe plain values."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return {str(k): normalize(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return [normalize(v) for v in sorted(value, key=repr)]
    if isinstance(value, (list, tuple)):
        return [normalize(v) for v in value]
    normalized = normalize_scalar(value)
    if normalized is value:
        raise SerializationError(f"Cannot serialize value of type {type(value).__name__}")
    return normalized


@runtime_checkable
class Serializer(Protocol):
    """Narrow structure → text interface used by the masker."""

    format_name: str

    def serialize(self, structure: Any) -> str: ...

    def deserialize(self, text: str) -> Any: ...


class JsonSerializer:
    """JSON serializer preserving key order.

    Examples:
        >>> JsonSerializer().serialize({"name": "J***", "age": 42})
        '{"name": "J***", "age": 42}'
    """

    format_name = "json"

    def __init__(self, indent: Optional[int] = None, ensure_ascii: bool = False):
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def serialize(self, structure: Any) -> str:
        try:
            return json.dumps(normalize(structure), indent=self.indent, ensure_ascii=self.ensure_ascii)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"JSON serialization failed: {e}", format_name=self.format_name) from e

    def deserialize(self, text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid JSON: {e}", format_name=self.format_name) from e


class YamlSerializer:
    """YAML serializer (block style, key order preserved)."""

    format_name = "yaml"

    def serialize(self, structure: Any) -> str:
        try:
            return yaml.safe_dump(
                normalize(structure),
                sort_keys=False,
                allow_unicode=True,
                default_flow_style=False,
            )
        except yaml.YAMLError as e:
            raise SerializationError(f"YAML serialization failed: {e}", format_name=self.format_name) from e

    def deserialize(self, text: str) -> Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SerializationError(f"Invalid YAML: {e}", format_name=self.format_name) from e
