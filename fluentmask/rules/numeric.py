"""Numeric generalization and perturbation rules."""

import bisect
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Any, ClassVar

from ..core.exceptions import ValueConversionError, create_rule_configuration_error
from ..core.types import RuleCategory
from .base import MaskRule, SeededMaskRule, coerce_enum

Number = int | float | Decimal


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _require_finite(rule: MaskRule, value: Number) -> None:
    """Reject infinities and NaN, which have no bucket or rounded multiple."""
    finite = value.is_finite() if isinstance(value, Decimal) else math.isfinite(value)
    if not finite:
        raise ValueConversionError(
            f"{rule.name} expects a finite number, got {value!r}", rule=rule.name
        )


def _like(original: Number, result: float | Decimal) -> Number:
    """Cast ``result`` back to the type of ``original``."""
    if isinstance(original, int):
        return int(round(result))
    if isinstance(original, Decimal):
        return result if isinstance(result, Decimal) else Decimal(str(result))
    return float(result)


class NoiseDistribution(Enum):
    UNIFORM = "uniform"
    LAPLACE = "laplace"


@dataclass(frozen=True)
class NoiseAdditiveRule(SeededMaskRule):
    """Add random noise bounded by ``max_abs`` (uniform) or scaled by it (Laplace).

    Laplace noise uses scale ``max_abs / ln 2`` so about half of the samples
    fall inside ``[-max_abs, max_abs]``.
    """

    category: ClassVar[RuleCategory] = RuleCategory.NUMERIC

    max_abs: float
    distribution: NoiseDistribution = NoiseDistribution.UNIFORM

    def __post_init__(self) -> None:
        if not _is_number(self.max_abs) or self.max_abs < 0:
            raise create_rule_configuration_error(
                self.name, "max_abs", self.max_abs, "must be a non-negative number"
            )
        coerce_enum(self, "distribution", NoiseDistribution, self.distribution)

    def apply(self, value: Number | None) -> Number | None:
        if value is None or self.max_abs == 0:
            return value
        rng = self._random(value)
        max_abs = float(self.max_abs)
        if self.distribution is NoiseDistribution.UNIFORM:
            noise = rng.uniform(-max_abs, max_abs)
        else:
            scale = max_abs / math.log(2.0)
            u = rng.random() - 0.5
            magnitude = min(abs(u), 0.5 - 1e-10)
            noise = -scale * math.copysign(1.0, u) * math.log(1.0 - 2.0 * magnitude)
        if isinstance(value, Decimal):
            return value + Decimal(str(noise))
        return _like(value, float(value) + noise)


@dataclass(frozen=True)
class RoundToRule(MaskRule):
    """Round to the nearest multiple of ``increment`` (half to even).

    Examples:
        >>> RoundToRule(1000).apply(52_499)
        52000
    """

    category: ClassVar[RuleCategory] = RuleCategory.NUMERIC

    increment: Number

    def __post_init__(self) -> None:
        if not _is_number(self.increment) or self.increment <= 0:
            raise create_rule_configuration_error(
                self.name, "increment", self.increment, "must be a positive number"
            )

    def apply(self, value: Number | None) -> Number | None:
        if value is None:
            return value
        _require_finite(self, value)
        increment = Decimal(str(self.increment))
        steps = (Decimal(str(value)) / increment).quantize(Decimal(1), rounding=ROUND_HALF_EVEN)
        return _like(value, steps * increment)


@dataclass(frozen=True)
class BucketizeRule(MaskRule):
    """Replace a number with the label of the bucket it falls into.

    ``breaks`` has one more entry than ``labels``; bucket ``i`` covers
    ``[breaks[i], breaks[i + 1])``. Values outside the range fall into the
    first or last bucket.

    Examples:
        >>> BucketizeRule((0, 18, 65, 150), ("minor", "adult", "senior")).apply(42)
        'adult'
    """

    category: ClassVar[RuleCategory] = RuleCategory.NUMERIC

    breaks: tuple[Number, ...]
    labels: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "breaks", tuple(self.breaks))
        object.__setattr__(self, "labels", tuple(self.labels))
        if not self.labels:
            raise create_rule_configuration_error(self.name, "labels", self.labels, "must not be empty")
        if len(self.breaks) != len(self.labels) + 1:
            raise create_rule_configuration_error(
                self.name,
                "breaks",
                self.breaks,
                f"must have exactly {len(self.labels) + 1} entries for {len(self.labels)} labels",
            )
        if not all(_is_number(b) for b in self.breaks):
            raise create_rule_configuration_error(self.name, "breaks", self.breaks, "must all be numbers")
        if any(a >= b for a, b in zip(self.breaks, self.breaks[1:])):
            raise create_rule_configuration_error(
                self.name, "breaks", self.breaks, "must be in strictly ascending order"
            )

    def apply(self, value: Number | None) -> str | None:
        if value is None:
            return None
        _require_finite(self, value)
        index = bisect.bisect_right(self.breaks, value) - 1
        index = max(0, min(index, len(self.labels) - 1))
        return self.labels[index]
