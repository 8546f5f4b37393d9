"""Fluent builders that accumulate an ordered rule chain for one property.

A builder is created fresh for every registration and finalized exactly
once; :meth:`MaskingBuilder.build` returns the chain as an immutable tuple.
"""

import logging
import types
import typing
from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar, TypeVar

from ..core.types import SeedProvider, as_seed_provider
from ..rules import (
    BlacklistCharsRule,
    BucketizeRule,
    CardMaskRule,
    CharClass,
    DateAgeMaskRule,
    DateAgeMode,
    DateShiftRule,
    EmailDomainStrategy,
    EmailMaskRule,
    HashAlgorithm,
    HashOutputFormat,
    HashRule,
    IBANMaskRule,
    KeepFirstRule,
    KeepLastRule,
    MaskCharClassRule,
    MaskEndRule,
    MaskFrom,
    MaskMiddleRule,
    MaskPercentageRule,
    MaskRangeRule,
    MaskRule,
    MaskStartRule,
    NoiseAdditiveRule,
    NoiseDistribution,
    NullOutRule,
    PhoneMaskRule,
    RedactRule,
    RegexMaskGroupRule,
    RegexReplaceRule,
    RoundToRule,
    SaltMode,
    TemplateMaskRule,
    TimeBucketOffsetRule,
    TimeBucketRule,
    TimeGranularity,
    TruncateRule,
    URLMaskRule,
    WhitelistCharsRule,
)

logger = logging.getLogger(__name__)

B = TypeVar("B", bound="MaskingBuilder")


class MaskingBuilder:
    """Base builder holding the ordered rules and the one-shot pending seed.

    ``with_seed`` applies to the next seed-aware rule only. Rules that are not
    seed-aware leave the pending seed in place; a seed still pending at
    ``build()`` is dropped without error.
    """

    kind: ClassVar[str] = "base"
    steps: ClassVar[tuple[str, ...]] = ("add_rule", "with_seed", "null_out", "redact")

    def __init__(self) -> None:
        self._rules: list[MaskRule] = []
        self._pending_seed: SeedProvider | None = None
        self._built = False

    def add_rule(self: B, rule: MaskRule) -> B:
        """Append a prebuilt rule, consuming the pending seed if it is seed-aware.

        Args:
            rule: Rule to append

        Returns:
            Self for method chaining

        Raises:
            TypeError: If ``rule`` is not a MaskRule
            RuntimeError: If the builder was already finalized
        """
        if self._built:
            raise RuntimeError(f"{type(self).__name__} was already built; create a new builder")
        if not isinstance(rule, MaskRule):
            raise TypeError(f"Expected a MaskRule, got {type(rule).__name__}")
        if self._pending_seed is not None and rule.seed_aware:
            rule = rule.with_seed(self._pending_seed)
            self._pending_seed = None
        self._rules.append(rule)
        return self

    def with_seed(self: B, seed: SeedProvider | int) -> B:
        """Make the next seed-aware rule reproducible.

        Args:
            seed: Constant seed or a function deriving a seed from the value

        Returns:
            Self for method chaining
        """
        self._pending_seed = as_seed_provider(seed)
        return self

    @property
    def has_pending_seed(self) -> bool:
        return self._pending_seed is not None

    def null_out(self: B) -> B:
        return self.add_rule(NullOutRule())

    def redact(self: B, text: str = "[REDACTED]") -> B:
        return self.add_rule(RedactRule(text))

    def build(self) -> tuple[MaskRule, ...]:
        """Finalize and return the rule chain in append order."""
        if self._pending_seed is not None:
            logger.debug(
                f"{type(self).__name__}: pending seed discarded, no seed-aware rule followed with_seed()"
            )
            self._pending_seed = None
        self._built = True
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


class StringMaskingBuilder(MaskingBuilder):
    """Builder for string rules.

    Examples:
        >>> chain = StringMaskingBuilder().mask_start(2).mask_end(2).keep_last(4).build()
        >>> len(chain)
        3
    """

    kind: ClassVar[str] = "string"
    steps: ClassVar[tuple[str, ...]] = MaskingBuilder.steps + (
        "mask_start",
        "mask_end",
        "mask_first",
        "mask_last",
        "mask_middle",
        "keep_first",
        "keep_last",
        "mask_range",
        "mask_percentage",
        "truncate",
        "template_mask",
        "regex_replace",
        "regex_mask_group",
        "whitelist_chars",
        "blacklist_chars",
        "mask_char_class",
        "phone_mask",
        "card_mask",
        "iban_mask",
        "email_mask",
        "url_mask",
        "date_age_mask",
        "hash",
    )

    def mask_start(self, count: int, mask_char: str = "*") -> "StringMaskingBuilder":
        """Mask the first ``count`` characters.

        Args:
            count: Number of leading characters to mask
            mask_char: Mask character

        Returns:
            Self for method chaining
        """
        return self.add_rule(MaskStartRule(count, mask_char))

    def mask_end(self, count: int, mask_char: str = "*") -> "StringMaskingBuilder":
        """Mask the last ``count`` characters.

        Args:
            count: Number of trailing characters to mask
            mask_char: Mask character

        Returns:
            Self for method chaining
        """
        return self.add_rule(MaskEndRule(count, mask_char))

    # Legacy aliases
    def mask_first(self, count: int, mask_char: str = "*") -> "StringMaskingBuilder":
        return self.mask_start(count, mask_char)

    def mask_last(self, count: int, mask_char: str = "*") -> "StringMaskingBuilder":
        return self.mask_end(count, mask_char)

    def mask_middle(self, keep_first: int, keep_last: int, mask_char: str = "*") -> "StringMaskingBuilder":
        return self.add_rule(MaskMiddleRule(keep_first, keep_last, mask_char))

    def keep_first(self, count: int, mask_char: str = "*") -> "StringMaskingBuilder":
        return self.add_rule(KeepFirstRule(count, mask_char))

    def keep_last(self, count: int, mask_char: str = "*") -> "StringMaskingBuilder":
        return self.add_rule(KeepLastRule(count, mask_char))

    def mask_range(self, start: int, length: int, mask_char: str = "*") -> "StringMaskingBuilder":
        return self.add_rule(MaskRangeRule(start, length, mask_char))

    def mask_percentage(
        self,
        percentage: float,
        mask_from: MaskFrom | str = MaskFrom.END,
        mask_char: str = "*",
    ) -> "StringMaskingBuilder":
        """Mask a share of the value.

        Args:
            percentage: Share to mask, between 0.0 and 1.0
            mask_from: Where masking starts (start, end or middle)
            mask_char: Mask character

        Returns:
            Self for method chaining
        """
        return self.add_rule(MaskPercentageRule(percentage, mask_from, mask_char))  # type: ignore[arg-type]

    def truncate(self, max_length: int, suffix: str = "…") -> "StringMaskingBuilder":
        return self.add_rule(TruncateRule(max_length, suffix))

    def template_mask(self, template: str) -> "StringMaskingBuilder":
        return self.add_rule(TemplateMaskRule(template))

    def regex_replace(
        self,
        pattern: str,
        replacement: str = "",
        flags: int | str = 0,
        timeout_ms: float | None = None,
    ) -> "StringMaskingBuilder":
        """Replace pattern matches.

        Args:
            pattern: Pattern for the ``regex`` engine
            replacement: Replacement text, may reference groups
            flags: ``regex`` flags or flag letters such as ``"i"``
            timeout_ms: Match timeout, defaults to the configured value

        Returns:
            Self for method chaining

        Raises:
            RuleConfigurationError: If the pattern does not compile
        """
        return self.add_rule(RegexReplaceRule(pattern, replacement, flags, timeout_ms))  # type: ignore[arg-type]

    def regex_mask_group(
        self,
        pattern: str,
        group: int = 1,
        mask_char: str = "*",
        flags: int | str = 0,
        timeout_ms: float | None = None,
    ) -> "StringMaskingBuilder":
        return self.add_rule(RegexMaskGroupRule(pattern, group, mask_char, flags, timeout_ms))  # type: ignore[arg-type]

    def whitelist_chars(self, allowed: str | typing.Iterable[str], replace_with: str = "") -> "StringMaskingBuilder":
        return self.add_rule(WhitelistCharsRule(allowed, replace_with))  # type: ignore[arg-type]

    def blacklist_chars(self, blocked: str | typing.Iterable[str], replace_with: str = "*") -> "StringMaskingBuilder":
        return self.add_rule(BlacklistCharsRule(blocked, replace_with))  # type: ignore[arg-type]

    def mask_char_class(self, char_class: CharClass | str, mask_char: str = "*") -> "StringMaskingBuilder":
        return self.add_rule(MaskCharClassRule(char_class, mask_char))  # type: ignore[arg-type]

    def phone_mask(
        self, keep_last: int = 2, preserve_separators: bool = True, mask_char: str = "*"
    ) -> "StringMaskingBuilder":
        return self.add_rule(PhoneMaskRule(keep_last, preserve_separators, mask_char))

    def card_mask(
        self,
        keep_first: int = 0,
        keep_last: int = 4,
        preserve_grouping: bool = True,
        validate_luhn: bool = False,
        mask_char: str = "*",
    ) -> "StringMaskingBuilder":
        return self.add_rule(CardMaskRule(keep_first, keep_last, preserve_grouping, validate_luhn, mask_char))

    def iban_mask(
        self,
        keep_last: int = 4,
        preserve_grouping: bool = True,
        validate: bool = True,
        mask_char: str = "*",
    ) -> "StringMaskingBuilder":
        return self.add_rule(IBANMaskRule(keep_last, preserve_grouping, validate, mask_char))

    def email_mask(
        self,
        local_keep: int = 1,
        domain_strategy: EmailDomainStrategy | str = EmailDomainStrategy.KEEP_ROOT,
        mask_char: str = "*",
    ) -> "StringMaskingBuilder":
        return self.add_rule(EmailMaskRule(local_keep, domain_strategy, mask_char))  # type: ignore[arg-type]

    def url_mask(
        self,
        hide_query: bool = False,
        mask_query_keys: str | typing.Iterable[str] = (),
        mask_path_segments: typing.Iterable[int] = (),
        mask_value: str = "***",
    ) -> "StringMaskingBuilder":
        """Mask query values and path segments of absolute URLs.

        Args:
            hide_query: Drop the whole query string
            mask_query_keys: Query keys whose values are replaced
            mask_path_segments: Zero-based indexes of path segments to replace
            mask_value: Replacement text

        Returns:
            Self for method chaining
        """
        return self.add_rule(
            URLMaskRule(hide_query, mask_query_keys, mask_path_segments, mask_value)  # type: ignore[arg-type]
        )

    def date_age_mask(
        self,
        mode: DateAgeMode | str = DateAgeMode.YEAR_ONLY,
        days_range: int = 180,
        mask_char: str = "*",
        separator: str = "-",
    ) -> "StringMaskingBuilder":
        """Generalize date text; seed-aware in ``date_shift`` mode."""
        return self.add_rule(
            DateAgeMaskRule(mode, days_range, mask_char=mask_char, separator=separator)  # type: ignore[arg-type]
        )

    def hash(
        self,
        algorithm: HashAlgorithm | str = HashAlgorithm.SHA256,
        salt_mode: SaltMode | str = SaltMode.STATIC,
        output_format: HashOutputFormat | str = HashOutputFormat.HEX,
        salt: bytes | str | None = None,
        field_name: str | None = None,
    ) -> "StringMaskingBuilder":
        return self.add_rule(HashRule(algorithm, salt_mode, output_format, salt, field_name))  # type: ignore[arg-type]


class NumericMaskingBuilder(MaskingBuilder):
    """Builder for int, float and Decimal rules."""

    kind: ClassVar[str] = "numeric"
    steps: ClassVar[tuple[str, ...]] = MaskingBuilder.steps + ("noise_additive", "round_to", "bucketize")

    def noise_additive(
        self, max_abs: float, distribution: NoiseDistribution | str = NoiseDistribution.UNIFORM
    ) -> "NumericMaskingBuilder":
        """Add bounded random noise; seed-aware.

        Args:
            max_abs: Noise bound (uniform) or scale (Laplace)
            distribution: ``uniform`` or ``laplace``

        Returns:
            Self for method chaining
        """
        return self.add_rule(NoiseAdditiveRule(max_abs, distribution))  # type: ignore[arg-type]

    def round_to(self, increment: int | float | Decimal) -> "NumericMaskingBuilder":
        return self.add_rule(RoundToRule(increment))

    def bucketize(self, breaks: typing.Sequence[Any], labels: typing.Sequence[str]) -> "NumericMaskingBuilder":
        return self.add_rule(BucketizeRule(tuple(breaks), tuple(labels)))


class DateTimeMaskingBuilder(MaskingBuilder):
    """Builder for date and datetime rules."""

    kind: ClassVar[str] = "date"
    steps: ClassVar[tuple[str, ...]] = MaskingBuilder.steps + (
        "date_shift",
        "time_bucket",
        "time_bucket_offset",
        "date_age_mask",
    )

    def date_shift(self, days_range: int) -> "DateTimeMaskingBuilder":
        """Shift by up to ``days_range`` days either way; seed-aware."""
        return self.add_rule(DateShiftRule(days_range))

    def time_bucket(self, granularity: TimeGranularity | str = TimeGranularity.DAY) -> "DateTimeMaskingBuilder":
        return self.add_rule(TimeBucketRule(granularity))  # type: ignore[arg-type]

    def time_bucket_offset(
        self, granularity: TimeGranularity | str = TimeGranularity.DAY
    ) -> "DateTimeMaskingBuilder":
        """Truncate timezone-aware datetimes, keeping their UTC offset."""
        return self.add_rule(TimeBucketOffsetRule(granularity))  # type: ignore[arg-type]

    def date_age_mask(
        self,
        mode: DateAgeMode | str = DateAgeMode.YEAR_ONLY,
        days_range: int = 180,
        mask_char: str = "*",
        separator: str = "-",
    ) -> "DateTimeMaskingBuilder":
        """Generalize dates of birth (year only, shift or redact); seed-aware.

        Args:
            mode: ``year_only``, ``date_shift`` or ``redact``
            days_range: Maximum shift in days for ``date_shift``
            mask_char: Mask character for the hidden month and day
            separator: Separator between year, month and day

        Returns:
            Self for method chaining
        """
        return self.add_rule(
            DateAgeMaskRule(mode, days_range, mask_char=mask_char, separator=separator)  # type: ignore[arg-type]
        )


BUILDERS: dict[str, type[MaskingBuilder]] = {
    StringMaskingBuilder.kind: StringMaskingBuilder,
    NumericMaskingBuilder.kind: NumericMaskingBuilder,
    DateTimeMaskingBuilder.kind: DateTimeMaskingBuilder,
}


def _unwrap_optional(declared_type: Any) -> Any:
    origin = typing.get_origin(declared_type)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(declared_type) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return declared_type


def infer_builder_kind(declared_type: Any) -> str:
    """Pick a builder kind from a property's declared type; defaults to ``string``."""
    target = _unwrap_optional(declared_type)
    if isinstance(target, type):
        if issubclass(target, (date, datetime)):
            return DateTimeMaskingBuilder.kind
        if issubclass(target, (int, float, Decimal)) and not issubclass(target, bool):
            return NumericMaskingBuilder.kind
    return StringMaskingBuilder.kind


def create_builder(kind: str) -> MaskingBuilder:
    """Return a fresh builder of ``kind`` (``string``, ``numeric`` or ``date``)."""
    try:
        return BUILDERS[kind.lower()]()
    except KeyError:
        raise ValueError(f"Unknown builder kind '{kind}'. Valid kinds: {', '.join(BUILDERS)}") from None
