"""Rules that delegate to another masker for nested objects."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

from ..core.exceptions import NestedMaskingError, create_rule_configuration_error
from ..core.types import RuleCategory
from .base import MaskRule


@runtime_checkable
class StructureMasker(Protocol):
    """Anything that can mask one object into an ordered mapping."""

    def mask_structure(self, instance: Any) -> tuple[dict[str, Any], list[str]]:
        """Return the assembled mapping and per-property error messages."""
        ...


def _require_masker(rule: MaskRule, masker: Any) -> None:
    if not isinstance(masker, StructureMasker):
        raise create_rule_configuration_error(
            rule.name, "masker", masker, "must provide mask_structure(instance)"
        )


@dataclass(frozen=True)
class MaskNestedRule(MaskRule):
    """Mask a single nested object with its own masker."""

    category: ClassVar[RuleCategory] = RuleCategory.ANY

    masker: StructureMasker

    def __post_init__(self) -> None:
        _require_masker(self, self.masker)

    def apply(self, value: Any) -> dict[str, Any] | None:
        if value is None:
            return None
        structure, errors = self.masker.mask_structure(value)
        if errors:
            raise NestedMaskingError(
                f"Nested masking failed: {'; '.join(errors)}", item_errors=list(errors), rule=self.name
            )
        return structure


@dataclass(frozen=True)
class MaskEachRule(MaskRule):
    """Mask every item of a collection with the same nested masker.

    ``None`` items are kept as ``None``. All items are attempted before a
    failure is reported, so the error lists every failing index.
    """

    category: ClassVar[RuleCategory] = RuleCategory.ANY

    masker: StructureMasker

    def __post_init__(self) -> None:
        _require_masker(self, self.masker)

    def apply(self, value: Iterable[Any] | None) -> list[Any] | None:
        if value is None:
            return None
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise NestedMaskingError(
                f"{self.name} expects a collection, got {type(value).__name__}", rule=self.name
            )

        masked: list[Any] = []
        item_errors: list[str] = []
        for index, item in enumerate(value):
            if item is None:
                masked.append(None)
                continue
            structure, errors = self.masker.mask_structure(item)
            masked.append(structure)
            item_errors.extend(f"[{index}] {error}" for error in errors)

        if item_errors:
            raise NestedMaskingError(
                f"Masking failed for {len(item_errors)} nested item error(s): {'; '.join(item_errors)}",
                item_errors=item_errors,
                rule=self.name,
            )
        return masked
