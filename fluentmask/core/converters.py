"""Value conversion between rule categories.

String rules are the bulk of the catalog, but the properties they are
registered on are not always strings (an ``int`` account number, a
``Decimal`` salary, a ``date`` of birth). The masker routes every rule
application through :func:`apply_rule`, which converts the value to the
rule's category and, where the masked text still parses, back again.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from threading import Lock
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from .exceptions import ValueConversionError
from .types import RuleCategory

if TYPE_CHECKING:
    from ..rules.base import MaskRule

logger = logging.getLogger(__name__)

_NUMERIC_TYPES = (int, float, Decimal)


@dataclass(frozen=True)
class TypeConverter:
    """Text round-trip for one value type."""

    value_type: type
    to_text: Callable[[Any], str]
    from_text: Callable[[str], Any]


def _bool_from_text(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _decimal_from_text(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"not a decimal: {text!r}") from e


class TypeConverterRegistry:
    """Registry of text converters keyed by value type.

    Lookup tries the exact type first, then walks the MRO, so ``bool`` and
    ``datetime`` win over their ``int`` and ``date`` bases.
    """

    def __init__(self, register_defaults: bool = True):
        self._lock = Lock()
        self._converters: dict[type, TypeConverter] = {}
        if register_defaults:
            self._register_defaults()

    def _register_defaults(self) -> None:
        self.register(str, str, str)
        self.register(bool, lambda v: "true" if v else "false", _bool_from_text)
        self.register(int, str, int)
        self.register(float, repr, float)
        self.register(Decimal, str, _decimal_from_text)
        self.register(datetime, datetime.isoformat, datetime.fromisoformat)
        self.register(date, date.isoformat, date.fromisoformat)
        self.register(time, time.isoformat, time.fromisoformat)
        self.register(UUID, str, UUID)

    def register(
        self,
        value_type: type,
        to_text: Callable[[Any], str],
        from_text: Callable[[str], Any],
    ) -> None:
        """Register (or replace) the converter for ``value_type``."""
        with self._lock:
            self._converters[value_type] = TypeConverter(value_type, to_text, from_text)
        logger.debug(f"Registered type converter for {value_type.__name__}")

    def find(self, value_type: type) -> Optional[TypeConverter]:
        converter = self._converters.get(value_type)
        if converter is not None:
            return converter
        for base in value_type.__mro__[1:]:
            converter = self._converters.get(base)
            if converter is not None:
                return converter
        return None

    def supports(self, value_type: type) -> bool:
        return self.find(value_type) is not None

    def to_text(self, value: Any) -> str:
        converter = self.find(type(value))
        if converter is None:
            raise ValueConversionError(
                f"No text converter registered for type {type(value).__name__}"
            )
        return converter.to_text(value)

    def from_text(self, text: str, value_type: type) -> Any:
        converter = self.find(value_type)
        if converter is None:
            raise ValueConversionError(f"No text converter registered for type {value_type.__name__}")
        try:
            return converter.from_text(text)
        except (ValueError, TypeError) as e:
            raise ValueConversionError(
                f"Cannot convert {text!r} to {value_type.__name__}: {e}"
            ) from e

    def restore(self, text: str, value_type: type) -> Any:
        """Convert masked text back to ``value_type`` when it still parses.

        Masked text such as ``"****1234"`` no longer parses as an ``int``; the
        text itself is returned in that case.
        """
        try:
            return self.from_text(text, value_type)
        except ValueConversionError:
            return text


_default_registry = TypeConverterRegistry()


def get_default_registry() -> TypeConverterRegistry:
    return _default_registry


def _parse_number(text: str) -> int | Decimal:
    stripped = text.strip()
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        number = Decimal(stripped)
    except InvalidOperation as e:
        raise ValueConversionError(f"Cannot apply a numeric rule to non-numeric text {text!r}") from e
    if not number.is_finite():
        raise ValueConversionError(f"Cannot apply a numeric rule to non-finite value {text!r}")
    return number


def _parse_temporal(text: str) -> date:
    stripped = text.strip()
    try:
        if "T" in stripped or " " in stripped or ":" in stripped:
            return datetime.fromisoformat(stripped)
        return date.fromisoformat(stripped)
    except ValueError as e:
        raise ValueConversionError(f"Cannot apply a date rule to non-date text {text!r}") from e


def apply_rule(
    rule: "MaskRule",
    value: Any,
    registry: Optional[TypeConverterRegistry] = None,
) -> Any:
    """Apply ``rule`` to ``value``, converting across categories when needed.

    Raises:
        ValueConversionError: If ``value`` cannot be represented in the
            rule's category
    """
    if value is None or rule.category is RuleCategory.ANY:
        return rule.apply(value)

    registry = registry or _default_registry

    if rule.category is RuleCategory.STRING:
        if isinstance(value, str):
            return rule.apply(value)
        masked = rule.apply(registry.to_text(value))
        if not isinstance(masked, str):
            return masked
        return registry.restore(masked, type(value))

    if rule.category is RuleCategory.NUMERIC:
        if isinstance(value, _NUMERIC_TYPES) and not isinstance(value, bool):
            return rule.apply(value)
        if isinstance(value, str):
            result = rule.apply(_parse_number(value))
            return str(result) if isinstance(result, _NUMERIC_TYPES) else result
        raise ValueConversionError(
            f"Numeric rule {type(rule).__name__} cannot be applied to {type(value).__name__}"
        )

    if rule.category is RuleCategory.DATE:
        if isinstance(value, date):
            return rule.apply(value)
        if isinstance(value, str):
            result = rule.apply(_parse_temporal(value))
            return result.isoformat() if isinstance(result, date) else result
        raise ValueConversionError(
            f"Date rule {type(rule).__name__} cannot be applied to {type(value).__name__}"
        )

    return rule.apply(value)
