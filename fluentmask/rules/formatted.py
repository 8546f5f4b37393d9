"""Rules for values with a recognizable format.

Malformed input (a failed Luhn or IBAN checksum, an address without ``@``)
is returned unchanged rather than raising, so one bad record never fails a
masking pass.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote, unquote_plus, urlsplit, urlunsplit

from ..core.exceptions import create_rule_configuration_error
from .base import MaskRule, coerce_enum, require_mask_char, require_non_negative
from .format_helpers import FormatPreserver

logger = logging.getLogger(__name__)

# PCI-DSS allows at most the first six and last four digits to be shown.
MAX_VISIBLE_CARD_DIGITS = 10

IBAN_LENGTHS: dict[str, int] = {
    "AD": 24, "AE": 23, "AL": 28, "AT": 20, "AZ": 28, "BA": 20, "BE": 16,
    "BG": 22, "BH": 22, "BR": 29, "BY": 28, "CH": 21, "CR": 22, "CY": 28,
    "CZ": 24, "DE": 22, "DK": 18, "DO": 28, "EE": 20, "EG": 29, "ES": 24,
    "FI": 18, "FO": 18, "FR": 27, "GB": 22, "GE": 22, "GI": 23, "GL": 18,
    "GR": 27, "GT": 28, "HR": 21, "HU": 28, "IE": 22, "IL": 23, "IS": 26,
    "IT": 27, "JO": 30, "KW": 30, "KZ": 20, "LB": 28, "LC": 32, "LI": 21,
    "LT": 20, "LU": 20, "LV": 21, "MC": 27, "MD": 24, "ME": 22, "MK": 19,
    "MR": 27, "MT": 31, "MU": 30, "NL": 18, "NO": 15, "PK": 24, "PL": 28,
    "PS": 29, "PT": 25, "QA": 29, "RO": 24, "RS": 22, "SA": 24, "SE": 24,
    "SI": 19, "SK": 24, "SM": 27, "TN": 24, "TR": 26, "UA": 29, "VA": 22,
    "VG": 24, "XK": 20,
}

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class PhoneMaskRule(MaskRule):
    """Mask phone digits except the last ``keep_last``.

    With ``preserve_separators`` the original layout (``+``, spaces, dashes,
    parentheses) is kept; without it only the digits are returned.
    """

    keep_last: int = 2
    preserve_separators: bool = True
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "keep_last", self.keep_last)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        return FormatPreserver.mask_content(
            value,
            keep_last=self.keep_last,
            mask_char=self.mask_char,
            preserve=self.preserve_separators,
        )


def luhn_valid(digits: str) -> bool:
    """Luhn mod-10 checksum over a digit string."""
    if not digits or not digits.isdigit():
        return False
    total = 0
    for index, char in enumerate(reversed(digits)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


@dataclass(frozen=True)
class CardMaskRule(MaskRule):
    """Mask a payment card number, showing at most ten digits."""

    keep_first: int = 0
    keep_last: int = 4
    preserve_grouping: bool = True
    validate_luhn: bool = False
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "keep_first", self.keep_first)
        require_non_negative(self.name, "keep_last", self.keep_last)
        if self.keep_first + self.keep_last > MAX_VISIBLE_CARD_DIGITS:
            raise create_rule_configuration_error(
                self.name,
                "keep_first + keep_last",
                self.keep_first + self.keep_last,
                f"must not exceed {MAX_VISIBLE_CARD_DIGITS} (PCI-DSS limit)",
            )
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        if self.validate_luhn:
            digits = "".join(c for c in value if c.isdigit())
            if not luhn_valid(digits):
                logger.debug("Card number failed Luhn validation, leaving value unchanged")
                return value
        return FormatPreserver.mask_content(
            value,
            keep_first=self.keep_first,
            keep_last=self.keep_last,
            mask_char=self.mask_char,
            preserve=self.preserve_grouping,
        )


def iban_valid(iban: str) -> bool:
    """Validate a normalized (upper-case, no spaces) IBAN."""
    if not 15 <= len(iban) <= 34:
        return False
    if not (iban[:2].isalpha() and iban[2:4].isdigit() and iban[4:].isalnum()):
        return False
    expected = IBAN_LENGTHS.get(iban[:2])
    if expected is not None and len(iban) != expected:
        return False
    rearranged = iban[4:] + iban[:4]
    remainder = 0
    for char in rearranged:
        chunk = char if char.isdigit() else str(ord(char) - ord("A") + 10)
        for digit in chunk:
            remainder = (remainder * 10 + int(digit)) % 97
    return remainder == 1


@dataclass(frozen=True)
class IBANMaskRule(MaskRule):
    """Mask an IBAN, keeping the country code, check digits and ``keep_last``.

    Examples:
        >>> IBANMaskRule().apply("DE89 3704 0044 0532 0130 00")
        'DE89 **** **** **** **30 00'
    """

    keep_last: int = 4
    preserve_grouping: bool = True
    validate: bool = True
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "keep_last", self.keep_last)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        normalized = value.replace(" ", "").upper()
        if self.validate and not iban_valid(normalized):
            logger.debug("Value is not a valid IBAN, leaving value unchanged")
            return value
        mask_end = len(normalized) - self.keep_last
        if mask_end <= 4:
            return value
        masked = normalized[:4] + self.mask_char[0] * (mask_end - 4) + normalized[mask_end:]
        if self.preserve_grouping and " " in value:
            return FormatPreserver.group(masked, 4)
        return masked


class EmailDomainStrategy(Enum):
    KEEP_ROOT = "keep_root"
    KEEP_FULL = "keep_full"
    MASK_ALL = "mask_all"


@dataclass(frozen=True)
class EmailMaskRule(MaskRule):
    """Mask the local part of an address and optionally its domain.

    A ``+tag`` suffix on the local part is kept. ``KEEP_ROOT`` reduces the
    domain to its last two labels.

    Examples:
        >>> EmailMaskRule().apply("jane.doe+news@mail.example.com")
        'j*******+news@example.com'
    """

    local_keep: int = 1
    domain_strategy: EmailDomainStrategy = EmailDomainStrategy.KEEP_ROOT
    mask_char: str = "*"

    def __post_init__(self) -> None:
        require_non_negative(self.name, "local_keep", self.local_keep)
        coerce_enum(self, "domain_strategy", EmailDomainStrategy, self.domain_strategy)
        require_mask_char(self.name, self.mask_char)

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        if not _EMAIL_PATTERN.match(value):
            logger.debug("Value is not an email address, leaving value unchanged")
            return value
        local, domain = value.split("@")
        return f"{self._mask_local(local)}@{self._mask_domain(domain)}"

    def _mask_local(self, local: str) -> str:
        plus = local.find("+")
        base, tag = (local[:plus], local[plus:]) if plus > 0 else (local, "")
        if self.local_keep >= len(base):
            return local
        return base[: self.local_keep] + self.mask_char[0] * (len(base) - self.local_keep) + tag

    def _mask_domain(self, domain: str) -> str:
        if self.domain_strategy is EmailDomainStrategy.KEEP_FULL:
            return domain
        labels = domain.split(".")
        if self.domain_strategy is EmailDomainStrategy.KEEP_ROOT:
            return ".".join(labels[-2:])
        return ".".join(
            label if len(label) <= 1 else label[0] + self.mask_char[0] * (len(label) - 1)
            for label in labels
        )


@dataclass(frozen=True)
class URLMaskRule(MaskRule):
    """Mask query parameters and path segments of an absolute URL.

    ``hide_query`` drops the query string entirely; otherwise the values of
    ``mask_query_keys`` (case-sensitive) are replaced with the URL-encoded
    ``mask_value``. ``mask_path_segments`` holds zero-based indexes of the
    non-empty path segments to replace. Scheme, credentials, host, port and
    fragment are kept. Relative or unparseable URLs are returned unchanged.

    Examples:
        >>> URLMaskRule(mask_path_segments=(1,)).apply("https://api.example.com/users/12345/profile")
        'https://api.example.com/users/***/profile'
    """

    hide_query: bool = False
    mask_query_keys: tuple[str, ...] = ()
    mask_path_segments: tuple[int, ...] = ()
    mask_value: str = "***"

    def __post_init__(self) -> None:
        keys = (self.mask_query_keys,) if isinstance(self.mask_query_keys, str) else tuple(self.mask_query_keys)
        if not all(isinstance(k, str) and k for k in keys):
            raise create_rule_configuration_error(
                self.name, "mask_query_keys", self.mask_query_keys, "must be non-empty strings"
            )
        object.__setattr__(self, "mask_query_keys", keys)
        segments = tuple(self.mask_path_segments)
        for index in segments:
            require_non_negative(self.name, "mask_path_segments", index)
        object.__setattr__(self, "mask_path_segments", segments)
        if not isinstance(self.mask_value, str):
            raise create_rule_configuration_error(self.name, "mask_value", self.mask_value, "must be a string")

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        try:
            parts = urlsplit(value)
        except ValueError:
            logger.debug("Value is not a parseable URL, leaving value unchanged")
            return value
        if not parts.scheme or not parts.netloc:
            logger.debug("Value is not an absolute URL, leaving value unchanged")
            return value

        query = parts.query
        if self.hide_query:
            query = ""
        elif self.mask_query_keys and query:
            query = self._mask_query(query)

        path = parts.path
        if self.mask_path_segments and path not in ("", "/"):
            path = self._mask_path(path)

        return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))

    def _mask_query(self, query: str) -> str:
        masked_value = quote(self.mask_value, safe="")
        pairs = []
        for pair in query.split("&"):
            if not pair:
                continue
            key = pair.partition("=")[0]
            if unquote_plus(key) in self.mask_query_keys:
                pairs.append(f"{key}={masked_value}")
            else:
                pairs.append(pair)
        return "&".join(pairs)

    def _mask_path(self, path: str) -> str:
        segments = path.split("/")
        index = 0
        for position, segment in enumerate(segments):
            if not segment:
                continue
            if index in self.mask_path_segments:
                segments[position] = self.mask_value
            index += 1
        return "/".join(segments)
