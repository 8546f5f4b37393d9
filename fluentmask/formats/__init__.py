"""Payload serialization formats."""

from .registry import FormatRegistry, SupportedFormat, get_format_registry
from .serialization import JsonSerializer, Serializer, YamlSerializer, normalize

__all__ = [
    "FormatRegistry",
    "SupportedFormat",
    "get_format_registry",
    "JsonSerializer",
    "YamlSerializer",
    "Serializer",
    "normalize",
]
