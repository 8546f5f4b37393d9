"""Position-based string rules.

Each rule masks by character index. The mask character is validated as a
non-empty string and its first character is used.
"""

import math
from dataclasses import dataclass
from enum import Enum

from ..core.exceptions import create_rule_configuration_error
from .base import MaskRule, coerce_enum, require_mask_char, require_non_negative


def _fill(mask_char: str, count: int) -> str:
    return mask_char[0] * count


@dataclass(frozen=True)
class MaskStartRule(MaskRule):
    """Mask the first ``count`` characters.

    Examples:
        >>> MaskStartRule(2).apply("HelloWorld")
        '**lloWorld'
    """

    count: int
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "count", self.count)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value or self.count == 0:
            return value
        if self.count >= len(value):
            return _fill(self.mask_char, len(value))
        return _fill(self.mask_char, self.count) + value[self.count :]


@dataclass(frozen=True)
class MaskEndRule(MaskRule):
    """Mask the last ``count`` characters."""

    count: int
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "count", self.count)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value or self.count == 0:
            return value
        if self.count >= len(value):
            return _fill(self.mask_char, len(value))
        return value[: -self.count] + _fill(self.mask_char, self.count)


@dataclass(frozen=True)
class MaskMiddleRule(MaskRule):
    """Keep ``keep_first`` leading and ``keep_last`` trailing characters, mask the rest.

    Both counts zero masks everything. When the kept characters cover the
    whole value it is returned unchanged.
    """

    keep_first: int
    keep_last: int
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "keep_first", self.keep_first)
        require_non_negative(self.name, "keep_last", self.keep_last)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        if self.keep_first == 0 and self.keep_last == 0:
            return _fill(self.mask_char, len(value))
        if self.keep_first + self.keep_last >= len(value):
            return value
        end = len(value) - self.keep_last
        return value[: self.keep_first] + _fill(self.mask_char, end - self.keep_first) + value[end:]


@dataclass(frozen=True)
class KeepFirstRule(MaskRule):
    """Keep the first ``count`` characters and mask the rest.

    ``count`` of zero masks everything; ``count`` at or beyond the length
    keeps everything.
    """

    count: int
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "count", self.count)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        if self.count >= len(value):
            return value
        return value[: self.count] + _fill(self.mask_char, len(value) - self.count)


@dataclass(frozen=True)
class KeepLastRule(MaskRule):
    """Keep the last ``count`` characters and mask the rest."""

    count: int
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "count", self.count)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        if self.count >= len(value):
            return value
        if self.count == 0:
            return _fill(self.mask_char, len(value))
        return _fill(self.mask_char, len(value) - self.count) + value[-self.count :]


@dataclass(frozen=True)
class MaskRangeRule(MaskRule):
    """Mask ``length`` characters starting at ``start``, clamped to the value."""

    start: int
    length: int
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "start", self.start)
        require_non_negative(self.name, "length", self.length)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value or self.start >= len(value) or self.length == 0:
            return value
        end = min(len(value), self.start + self.length)
        return value[: self.start] + _fill(self.mask_char, end - self.start) + value[end:]


class MaskFrom(Enum):
    START = "start"
    END = "end"
    MIDDLE = "middle"


@dataclass(frozen=True)
class MaskPercentageRule(MaskRule):
    """Mask ``ceil(len * percentage)`` characters from the start, end or middle."""

    percentage: float
    mask_from: MaskFrom = MaskFrom.END
    mask_char: str = "*"

    def __post_init__(self) -> None:
        if (
            isinstance(self.percentage, bool)
            or not isinstance(self.percentage, (int, float))
            or not 0.0 <= self.percentage <= 1.0
        ):
            raise create_rule_configuration_error(
                self.name, "percentage", self.percentage, "must be between 0.0 and 1.0"
            )
        coerce_enum(self, "mask_from", MaskFrom, self.mask_from)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        count = math.ceil(len(value) * self.percentage)
        if count == 0:
            return value
        if self.mask_from is MaskFrom.START:
            return MaskStartRule(count, self.mask_char).apply(value)
        if self.mask_from is MaskFrom.END:
            return MaskEndRule(count, self.mask_char).apply(value)
        keep = (len(value) - count) // 2
        return MaskMiddleRule(keep, keep, self.mask_char).apply(value)


# Legacy names kept for callers of the older API.
MaskFirstRule = MaskStartRule
MaskLastRule = MaskEndRule
