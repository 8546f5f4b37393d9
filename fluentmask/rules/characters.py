"""Character-set rules."""

import unicodedata
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..core.exceptions import create_rule_configuration_error
from .base import MaskRule, coerce_enum, require_mask_char


class CharClass(Enum):
    DIGIT = "digit"
    LETTER = "letter"
    LETTER_OR_DIGIT = "letter_or_digit"
    WHITESPACE = "whitespace"
    PUNCTUATION = "punctuation"
    UPPER = "upper"
    LOWER = "lower"


def _is_punctuation(char: str) -> bool:
    return unicodedata.category(char).startswith("P")


_PREDICATES: dict[CharClass, Callable[[str], bool]] = {
    CharClass.DIGIT: str.isdigit,
    CharClass.LETTER: str.isalpha,
    CharClass.LETTER_OR_DIGIT: str.isalnum,
    CharClass.WHITESPACE: str.isspace,
    CharClass.PUNCTUATION: _is_punctuation,
    CharClass.UPPER: str.isupper,
    CharClass.LOWER: str.islower,
}


def _as_char_set(rule: MaskRule, parameter: str, chars: object) -> frozenset[str]:
    if isinstance(chars, str):
        char_set = frozenset(chars)
    elif isinstance(chars, (list, tuple, set, frozenset)) and all(
        isinstance(c, str) and len(c) == 1 for c in chars
    ):
        char_set = frozenset(chars)
    else:
        raise create_rule_configuration_error(
            rule.name, parameter, chars, "must be a string or a collection of single characters"
        )
    if not char_set:
        raise create_rule_configuration_error(rule.name, parameter, chars, "must not be empty")
    return char_set


@dataclass(frozen=True)
class WhitelistCharsRule(MaskRule):
    """Keep only ``allowed`` characters; others become ``replace_with``.

    The default empty ``replace_with`` removes disallowed characters.
    """

    allowed: frozenset[str]
    replace_with: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed", _as_char_set(self, "allowed", self.allowed))
        if self.replace_with is None:
            object.__setattr__(self, "replace_with", "")

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        return "".join(c if c in self.allowed else self.replace_with for c in value)


@dataclass(frozen=True)
class BlacklistCharsRule(MaskRule):
    """Replace every ``blocked`` character with ``replace_with``."""

    blocked: frozenset[str]
    replace_with: str = "*"

    def __post_init__(self) -> None:
        object.__setattr__(self, "blocked", _as_char_set(self, "blocked", self.blocked))
        if self.replace_with is None:
            object.__setattr__(self, "replace_with", "")

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        return "".join(self.replace_with if c in self.blocked else c for c in value)


@dataclass(frozen=True)
class MaskCharClassRule(MaskRule):
    """Mask every character belonging to ``char_class``.

    Examples:
        >>> MaskCharClassRule(CharClass.DIGIT).apply("Room 42")
        'Room **'
    """

    char_class: CharClass
    mask_char: str = "*"

    def __post_init__(self) -> None:
        coerce_enum(self, "char_class", CharClass, self.char_class)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        predicate = _PREDICATES[self.char_class]
        mask = self.mask_char[0]
        return "".join(mask if predicate(c) else c for c in value)
