"""Whole-value replacement rules: discard, constant, truncation and templates."""

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..core.exceptions import create_rule_configuration_error
from ..core.types import RuleCategory
from .base import MaskRule, require_non_negative

_TOKEN_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


@dataclass(frozen=True)
class NullOutRule(MaskRule):
    """Discard the value entirely."""

    category: ClassVar[RuleCategory] = RuleCategory.ANY

    def apply(self, value: Any) -> None:
        return None


@dataclass(frozen=True)
class RedactRule(MaskRule):
    """Replace any non-null value, including ``""``, with a constant text."""

    category: ClassVar[RuleCategory] = RuleCategory.ANY

    text: str = "[REDACTED]"

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise create_rule_configuration_error(self.name, "text", self.text, "must be a string")

    def apply(self, value: Any) -> str | None:
        if value is None:
            return None
        return self.text


@dataclass(frozen=True)
class TruncateRule(MaskRule):
    """Cut values longer than ``max_length``, appending ``suffix``.

    The suffix counts toward ``max_length``.
    """

    max_length: int
    suffix: str = "…"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "max_length", self.max_length)
        if self.suffix is None:
            object.__setattr__(self, "suffix", "")

    def apply(self, value: str | None) -> str | None:
        if not value or len(value) <= self.max_length:
            return value
        keep = max(0, self.max_length - len(self.suffix))
        return value[:keep] + self.suffix


@dataclass(frozen=True)
class TemplateMaskRule(MaskRule):
    """Render ``template`` with tokens drawn from the input.

    Tokens:
        ``{{F|n}}``         first n characters (default 1)
        ``{{L|n}}``         last n characters (default 1)
        ``{{*xN}}``         N asterisks
        ``{{digits}}``      all digits; ``{{digits|a-b}}`` slices them,
                            ``{{digits|-n}}`` keeps the last n
        ``{{letters}}``     same as ``digits`` for letters

    Unknown tokens are left in place.

    Examples:
        >>> TemplateMaskRule("{{F|1}}***{{L|1}}").apply("Jonathan")
        'J***n'
    """

    template: str

    def __post_init__(self) -> None:
        if not isinstance(self.template, str):
            raise create_rule_configuration_error(self.name, "template", self.template, "must be a string")
        for match in _TOKEN_PATTERN.finditer(self.template):
            try:
                self._render_token(match.group(1), "")
            except ValueError as e:
                raise create_rule_configuration_error(
                    self.name, "template", match.group(0), f"has a malformed token ({e})"
                ) from e

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        return _TOKEN_PATTERN.sub(lambda m: self._render_token(m.group(1), value), self.template)

    @staticmethod
    def _render_token(token: str, value: str) -> str:
        command, _, args = token.partition("|")
        if command == "F":
            n = int(args) if args else 1
            return value[:n]
        if command == "L":
            n = int(args) if args else 1
            return value[-n:] if n else ""
        if command.startswith("*x"):
            return "*" * int(command[2:])
        if command == "digits":
            return _slice("".join(c for c in value if c.isdigit()), args)
        if command == "letters":
            return _slice("".join(c for c in value if c.isalpha()), args)
        return "{{" + token + "}}"


def _slice(text: str, bounds: str) -> str:
    if not bounds:
        return text
    start_text, _, end_text = bounds.partition("-")
    if not start_text:
        count = int(end_text)
        return text[max(0, len(text) - count) :]
    start = int(start_text)
    end = int(end_text) if end_text else len(text)
    start = max(0, min(start, len(text)))
    end = max(0, min(end, len(text)))
    return text[start:max(start, end)]
