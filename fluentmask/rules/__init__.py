"""Mask rule catalog.

Every rule implements :class:`MaskRule`; seed-aware rules additionally derive
from :class:`SeededMaskRule`.
"""

from .base import MaskRule, SeededMaskRule
from .characters import BlacklistCharsRule, CharClass, MaskCharClassRule, WhitelistCharsRule
from .format_helpers import FormatPreserver
from .formatted import (
    CardMaskRule,
    EmailDomainStrategy,
    EmailMaskRule,
    IBANMaskRule,
    PhoneMaskRule,
    URLMaskRule,
    iban_valid,
    luhn_valid,
)
from .hashing import HashAlgorithm, HashOutputFormat, HashRule, SaltMode
from .nested import MaskEachRule, MaskNestedRule, StructureMasker
from .numeric import BucketizeRule, NoiseAdditiveRule, NoiseDistribution, RoundToRule
from .patterns import RegexMaskGroupRule, RegexReplaceRule
from .positional import (
    KeepFirstRule,
    KeepLastRule,
    MaskEndRule,
    MaskFirstRule,
    MaskFrom,
    MaskLastRule,
    MaskMiddleRule,
    MaskPercentageRule,
    MaskRangeRule,
    MaskStartRule,
)
from .replacement import NullOutRule, RedactRule, TemplateMaskRule, TruncateRule
from .temporal import (
    HIPAA_AGE_BREAKS,
    HIPAA_AGE_LABELS,
    DateAgeMaskRule,
    DateAgeMode,
    DateShiftRule,
    TimeBucketOffsetRule,
    TimeBucketRule,
    TimeGranularity,
    parse_date_text,
)

__all__ = [
    # Contract
    "MaskRule",
    "SeededMaskRule",
    "StructureMasker",
    "FormatPreserver",
    # Positional
    "MaskStartRule",
    "MaskEndRule",
    "MaskFirstRule",
    "MaskLastRule",
    "MaskMiddleRule",
    "KeepFirstRule",
    "KeepLastRule",
    "MaskRangeRule",
    "MaskPercentageRule",
    "MaskFrom",
    # Replacement
    "NullOutRule",
    "RedactRule",
    "TruncateRule",
    "TemplateMaskRule",
    # Characters and patterns
    "WhitelistCharsRule",
    "BlacklistCharsRule",
    "MaskCharClassRule",
    "CharClass",
    "RegexReplaceRule",
    "RegexMaskGroupRule",
    # Formatted
    "PhoneMaskRule",
    "CardMaskRule",
    "IBANMaskRule",
    "EmailMaskRule",
    "EmailDomainStrategy",
    "URLMaskRule",
    "luhn_valid",
    "iban_valid",
    "HashRule",
    "HashAlgorithm",
    "SaltMode",
    "HashOutputFormat",
    # Numeric and temporal
    "NoiseAdditiveRule",
    "NoiseDistribution",
    "RoundToRule",
    "BucketizeRule",
    "DateShiftRule",
    "TimeBucketRule",
    "TimeGranularity",
    "TimeBucketOffsetRule",
    "DateAgeMaskRule",
    "DateAgeMode",
    "HIPAA_AGE_BREAKS",
    "HIPAA_AGE_LABELS",
    "parse_date_text",
    # Nested
    "MaskEachRule",
    "MaskNestedRule",
]
