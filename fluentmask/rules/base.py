"""The single rule contract every masking step implements."""

import dataclasses
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

from ..core.exceptions import create_rule_configuration_error
from ..core.types import RuleCategory, SeedProvider, as_seed_provider

R = TypeVar("R", bound="MaskRule")

# SystemRandom draws from os.urandom and is safe to share between threads.
_SYSTEM_RANDOM = random.SystemRandom()


class MaskRule(ABC):
    """A single transformation step applied to one property value.

    Concrete rules are frozen dataclasses whose parameters are validated in
    ``__post_init__``, so a rule that constructs successfully never fails on
    its parameters at ``apply`` time.

    Contract for ``apply``:
        * ``None`` passes through unchanged
        * ``""`` is a no-op, except for constant and discard rules
    """

    category: ClassVar[RuleCategory] = RuleCategory.STRING
    seed_aware: ClassVar[bool] = False

    @abstractmethod
    def apply(self, value: Any) -> Any:
        """Transform ``value``."""

    def with_seed(self: R, provider: "SeedProvider | int") -> R:
        raise TypeError(f"{type(self).__name__} does not accept a seed provider")

    @property
    def name(self) -> str:
        return type(self).__name__

    def __call__(self, value: Any) -> Any:
        return self.apply(value)


@dataclass(frozen=True)
class SeededMaskRule(MaskRule):
    """Rule whose randomness can be made reproducible with a seed provider.

    Without a provider each call draws from :class:`random.SystemRandom`.
    With one, the seed derived from the input value drives a private
    :class:`random.Random`, so equal inputs yield equal outputs.
    """

    seed_aware: ClassVar[bool] = True

    seed_provider: SeedProvider | None = field(default=None, kw_only=True, compare=False, repr=False)

    def with_seed(self: R, provider: "SeedProvider | int") -> R:
        return dataclasses.replace(self, seed_provider=as_seed_provider(provider))  # type: ignore[type-var]

    def _random(self, value: Any) -> random.Random:
        if self.seed_provider is None:
            return _SYSTEM_RANDOM
        return random.Random(self.seed_provider(value))


def require_non_negative(rule: str, parameter: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise create_rule_configuration_error(rule, parameter, value, "must be a non-negative integer")


def require_mask_char(rule: str, mask_char: Any) -> None:
    if not isinstance(mask_char, str) or not mask_char:
        raise create_rule_configuration_error(rule, "mask_char", mask_char, "must be a non-empty string")


def coerce_enum(rule: MaskRule, parameter: str, enum_cls: type, value: Any) -> None:
    """Accept an enum member or its (case-insensitive) value on a frozen rule."""
    if isinstance(value, enum_cls):
        return
    try:
        member = enum_cls(str(value).lower())
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise create_rule_configuration_error(
            rule.name, parameter, value, f"must be one of: {valid}"
        ) from None
    object.__setattr__(rule, parameter, member)
