"""Salted one-way hashing."""

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..core.exceptions import create_rule_configuration_error
from .base import MaskRule, coerce_enum

logger = logging.getLogger(__name__)


class HashAlgorithm(Enum):
    SHA256 = "sha256"
    SHA512 = "sha512"
    MD5 = "md5"


class SaltMode(Enum):
    STATIC = "static"
    """One salt for the rule's lifetime; equal inputs hash equally."""

    PER_RECORD = "per_record"
    """Fresh random salt on every call; output is not linkable."""

    PER_FIELD = "per_field"
    """Salt derived from ``field_name``; stable across processes."""


class HashOutputFormat(Enum):
    HEX = "hex"
    BASE64 = "base64"
    BASE64URL = "base64url"


@dataclass(frozen=True)
class HashRule(MaskRule):
    """Replace a value with its salted digest.

    ``STATIC`` mode without an explicit ``salt`` draws a random salt once, so
    digests are consistent within one rule instance but not across processes.
    """

    algorithm: HashAlgorithm = HashAlgorithm.SHA256
    salt_mode: SaltMode = SaltMode.STATIC
    output_format: HashOutputFormat = HashOutputFormat.HEX
    salt: Optional[bytes] = field(default=None, repr=False)
    field_name: Optional[str] = None

    def __post_init__(self) -> None:
        coerce_enum(self, "algorithm", HashAlgorithm, self.algorithm)
        coerce_enum(self, "salt_mode", SaltMode, self.salt_mode)
        coerce_enum(self, "output_format", HashOutputFormat, self.output_format)

        if isinstance(self.salt, str):
            object.__setattr__(self, "salt", self.salt.encode("utf-8"))
        elif self.salt is not None and not isinstance(self.salt, bytes):
            raise create_rule_configuration_error(self.name, "salt", self.salt, "must be bytes or str")

        if self.salt_mode is SaltMode.STATIC and self.salt is None:
            object.__setattr__(self, "salt", secrets.token_bytes(16))
        if self.salt_mode is SaltMode.PER_FIELD:
            if not self.field_name:
                raise create_rule_configuration_error(
                    self.name, "field_name", self.field_name, "is required for per-field salting"
                )
            object.__setattr__(self, "salt", hashlib.sha256(self.field_name.encode("utf-8")).digest())

        if self.algorithm is HashAlgorithm.MD5:
            logger.warning("MD5 is cryptographically broken and should not be used for security purposes")

    def apply(self, value: str | None) -> str | None:
        if not value:
            return value
        salt = secrets.token_bytes(16) if self.salt_mode is SaltMode.PER_RECORD else self.salt
        digest = hashlib.new(self.algorithm.value, salt + value.encode("utf-8")).digest()
        return self._format(digest)

    def _format(self, digest: bytes) -> str:
        if self.output_format is HashOutputFormat.HEX:
            return digest.hex()
        if self.output_format is HashOutputFormat.BASE64:
            return base64.b64encode(digest).decode("ascii")
        return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
