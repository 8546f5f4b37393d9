"""Shared enums and type aliases used across the masking pipeline."""

from collections.abc import Callable
from enum import Enum
from typing import Any

SeedProvider = Callable[[Any], int]
"""Maps an input value to a deterministic seed."""


class PropertyRuleBehavior(Enum):
    """Controls which properties of the target type reach the masked output."""

    INCLUDE = "include"
    """Only properties with a registered rule chain appear, transformed."""

    EXCLUDE = "exclude"
    """Every property appears; unregistered ones pass through untouched."""

    REMOVE = "remove"
    """Every property appears except registered ones, which are omitted."""

    @classmethod
    def from_string(cls, value: "str | PropertyRuleBehavior") -> "PropertyRuleBehavior":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown property behavior '{value}'. Valid values: {valid}") from e


class RuleCategory(Enum):
    """Value category a rule operates on."""

    STRING = "string"
    NUMERIC = "numeric"
    DATE = "date"
    ANY = "any"


def constant_seed(seed: int) -> SeedProvider:
    """Wrap a constant integer as a seed provider."""
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise ValueError(f"seed must be an integer, got {seed!r}")

    def provider(_value: Any) -> int:
        return seed

    provider.__name__ = f"constant_seed_{seed}"
    return provider


def as_seed_provider(seed: "SeedProvider | int") -> SeedProvider:
    """Normalize an int or callable into a seed provider."""
    if callable(seed):
        return seed
    return constant_seed(seed)
