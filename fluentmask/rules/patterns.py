"""Pattern-matching rules.

Patterns run on the third-party ``regex`` engine because it supports a
per-call ``timeout``; catastrophic backtracking surfaces as
:class:`~fluentmask.core.exceptions.PatternTimeoutError` instead of hanging
the masking pass.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import regex

from ..core.config import get_default_config
from ..core.exceptions import PatternTimeoutError, create_rule_configuration_error
from .base import MaskRule, require_mask_char, require_non_negative

logger = logging.getLogger(__name__)

_FLAG_LETTERS = {
    "i": regex.IGNORECASE,
    "m": regex.MULTILINE,
    "s": regex.DOTALL,
    "x": regex.VERBOSE,
    "a": regex.ASCII,
}


def _resolve_flags(rule: MaskRule, flags: Any) -> int:
    if isinstance(flags, bool):
        raise create_rule_configuration_error(rule.name, "flags", flags, "must be an int or flag letters")
    if isinstance(flags, int):
        return flags
    if isinstance(flags, str):
        resolved = 0
        for letter in flags.lower():
            if letter not in _FLAG_LETTERS:
                raise create_rule_configuration_error(
                    rule.name, "flags", flags, f"may only contain {''.join(_FLAG_LETTERS)}"
                )
            resolved |= _FLAG_LETTERS[letter]
        return resolved
    raise create_rule_configuration_error(rule.name, "flags", flags, "must be an int or flag letters")


def _compile(rule: MaskRule, pattern: Any, flags: int) -> Any:
    if not isinstance(pattern, str) or not pattern:
        raise create_rule_configuration_error(rule.name, "pattern", pattern, "must be a non-empty string")
    try:
        return regex.compile(pattern, flags)
    except regex.error as e:
        raise create_rule_configuration_error(rule.name, "pattern", pattern, f"is not a valid pattern ({e})") from e


def _resolve_timeout(rule: MaskRule, timeout_ms: Optional[float]) -> float:
    if timeout_ms is None:
        return get_default_config().regex_timeout_ms
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, (int, float)) or timeout_ms <= 0:
        raise create_rule_configuration_error(rule.name, "timeout_ms", timeout_ms, "must be a positive number")
    return float(timeout_ms)


class _PatternRule(MaskRule):
    """Shared compile and timeout handling for pattern rules."""

    pattern: str
    flags: int
    timeout_ms: Optional[float]
    _compiled: Any

    def _prepare(self) -> None:
        object.__setattr__(self, "flags", _resolve_flags(self, self.flags))
        object.__setattr__(self, "timeout_ms", _resolve_timeout(self, self.timeout_ms))
        object.__setattr__(self, "_compiled", _compile(self, self.pattern, self.flags))

    def _substitute(self, repl: Any, value: str) -> str:
        try:
            return self._compiled.sub(repl, value, timeout=self.timeout_ms / 1000.0)
        except TimeoutError as e:
            logger.warning(f"{self.name} timed out after {self.timeout_ms}ms on pattern {self.pattern!r}")
            raise PatternTimeoutError(
                f"Regex timeout exceeded ({self.timeout_ms}ms) for pattern {self.pattern!r}",
                pattern=self.pattern,
                timeout_ms=self.timeout_ms,
                rule=self.name,
            ) from e


@dataclass(frozen=True)
class RegexReplaceRule(_PatternRule):
    """Replace every match of ``pattern`` with ``replacement``.

    ``replacement`` may reference groups as ``\\1`` or ``\\g<name>``.
    ``flags`` takes ``regex`` flag values or letters (``"i"``, ``"ms"``).

    Examples:
        >>> RegexReplaceRule(r"\\d", "#").apply("a1b2")
        'a#b#'
    """

    pattern: str
    replacement: str = ""
    flags: int = 0
    timeout_ms: Optional[float] = None
    _compiled: Any = field(init=False, repr=False, compare=False, default=None)

    def __post_init__(self) -> None:
        if not isinstance(self.replacement, str):
            raise create_rule_configuration_error(self.name, "replacement", self.replacement, "must be a string")
        self._prepare()

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        return self._substitute(self.replacement, value)


@dataclass(frozen=True)
class RegexMaskGroupRule(_PatternRule):
    """Mask the characters of capture group ``group`` in every match.

    Matches where the group did not participate are left untouched.

    Examples:
        >>> RegexMaskGroupRule(r"(\\w+)@", group=1).apply("jane@example.com")
        '****@example.com'
    """

    pattern: str
    group: int = 1
    mask_char: str = "*"
    flags: int = 0
    timeout_ms: Optional[float] = None
    _compiled: Any = field(init=False, repr=False, compare=False, default=None)

    def __post_init__(self) -> None:
        require_non_negative(self.name, "group", self.group)
        require_mask_char(self.name, self.mask_char)
        self._prepare()

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        return self._substitute(self._mask_match, value)

    def _mask_match(self, match: Any) -> str:
        text = match.group(0)
        if self.group > len(match.groups()):
            return text
        start, end = match.span(self.group)
        if start < 0:
            return text
        offset = match.start(0)
        return text[: start - offset] + self.mask_char[0] * (end - start) + text[end - offset :]
