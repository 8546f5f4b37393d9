"""Assemble masked property values into a plain, serializable structure."""

from collections.abc import Mapping
from typing import Any

from ..core.accessor import get_accessor, is_accessible_type
from ..core.results import MaskingResult, MaskingStats
from ..formats.serialization import Serializer


def to_structure(value: Any) -> Any:
    """Convert nested objects to mappings and lists.

    Dataclasses, pydantic models, named tuples and plain classes with
    annotated or ``property`` attributes are read through their
    compiled accessor, so nested output follows the same property order as
    top-level output. Scalars are returned unchanged and normalized later by
    the serializer.
    """
    if value is None or isinstance(value, (str, bytes, bool, int, float)):
        return value
    if is_accessible_type(type(value)):
        accessor = get_accessor(type(value))
        return {name: to_structure(raw) for name, raw in accessor.to_dict(value).items()}
    if isinstance(value, Mapping):
        return {key: to_structure(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_structure(item) for item in value]
    if isinstance(value, (set, frozenset)):
        # scalar sets are sorted by the serializer
        if all(not is_accessible_type(type(item)) for item in value):
            return value
        return [to_structure(item) for item in value]
    return value


def assemble_result(
    structure: dict[str, Any],
    errors: list[str],
    stats: MaskingStats,
    serializer: Serializer,
) -> MaskingResult:
    """Serialize ``structure`` and wrap it with the error list and stats.

    Raises:
        SerializationError: If the structure cannot be serialized
    """
    return MaskingResult(
        masked_data=serializer.serialize(structure),
        is_success=not errors,
        errors=tuple(errors),
        data=structure,
        stats=stats,
    )
