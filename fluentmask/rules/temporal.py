"""Date and datetime rules."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import ClassVar

from ..core.exceptions import ValueConversionError, create_rule_configuration_error
from ..core.types import RuleCategory
from .base import MaskRule, SeededMaskRule, coerce_enum, require_mask_char, require_non_negative
from .numeric import BucketizeRule

logger = logging.getLogger(__name__)

# HIPAA Safe Harbor age bands; ages of 90 and over are pooled.
HIPAA_AGE_BREAKS: tuple[int, ...] = (0, 6, 11, 21, 31, 41, 51, 61, 71, 81, 90, 150)
HIPAA_AGE_LABELS: tuple[str, ...] = (
    "0-5", "6-10", "11-20", "21-30", "31-40", "41-50", "51-60", "61-70", "71-80", "81-89", "90+",
)

# Tried in order after ISO 8601; day-first wins for ambiguous input.
_DATE_TEXT_FORMATS = ("%Y/%m/%d", "%d-%m-%Y", "%d/%m/%Y", "%m-%d-%Y", "%m/%d/%Y", "%d.%m.%Y")


@dataclass(frozen=True)
class DateShiftRule(SeededMaskRule):
    """Shift a date by a random whole number of days in ``[-days_range, days_range]``.

    Time of day and tzinfo are preserved. With a seed provider the same
    input always shifts by the same amount.
    """

    category: ClassVar[RuleCategory] = RuleCategory.DATE

    days_range: int

    def __post_init__(self) -> None:
        require_non_negative(self.name, "days_range", self.days_range)

    def apply(self, value: date | None) -> date | None:
        if value is None or self.days_range == 0:
            return value
        shift = self._random(value).randint(-self.days_range, self.days_range)
        return value + timedelta(days=shift)


class TimeGranularity(Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class TimeBucketRule(MaskRule):
    """Truncate a date or datetime to the start of its period.

    Weeks start on Monday. ``HOUR`` on a plain ``date`` leaves it unchanged.

    Examples:
        >>> TimeBucketRule(TimeGranularity.QUARTER).apply(date(2024, 8, 17))
        datetime.date(2024, 7, 1)
    """

    category: ClassVar[RuleCategory] = RuleCategory.DATE

    granularity: TimeGranularity = TimeGranularity.DAY

    def __post_init__(self) -> None:
        coerce_enum(self, "granularity", TimeGranularity, self.granularity)

    def apply(self, value: date | None) -> date | None:
        if value is None:
            return value
        g = self.granularity
        if isinstance(value, datetime):
            if g is TimeGranularity.HOUR:
                return value.replace(minute=0, second=0, microsecond=0)
            midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
            return self._truncate_day(midnight)
        return self._truncate_day(value)

    def _truncate_day(self, value: date) -> date:
        g = self.granularity
        if g in (TimeGranularity.HOUR, TimeGranularity.DAY):
            return value
        if g is TimeGranularity.WEEK:
            return value - timedelta(days=value.weekday())
        if g is TimeGranularity.MONTH:
            return value.replace(day=1)
        if g is TimeGranularity.QUARTER:
            return value.replace(month=((value.month - 1) // 3) * 3 + 1, day=1)
        return value.replace(month=1, day=1)


@dataclass(frozen=True)
class TimeBucketOffsetRule(TimeBucketRule):
    """Truncate a timezone-aware datetime while pinning its UTC offset.

    The result carries a fixed ``timezone`` equal to the input's offset, so
    truncating across a DST change never moves the instant's offset. Naive
    datetimes and plain dates are rejected.

    Examples:
        >>> value = datetime(2024, 8, 17, 13, 45, tzinfo=timezone(timedelta(hours=2)))
        >>> TimeBucketOffsetRule("day").apply(value).isoformat()
        '2024-08-17T00:00:00+02:00'
    """

    def apply(self, value: datetime | None) -> datetime | None:
        if value is None:
            return value
        offset = value.utcoffset() if isinstance(value, datetime) else None
        if offset is None:
            raise ValueConversionError(
                f"{self.name} expects a timezone-aware datetime, got {value!r}", rule=self.name
            )
        return super().apply(value.replace(tzinfo=timezone(offset)))


class DateAgeMode(Enum):
    YEAR_ONLY = "year_only"
    DATE_SHIFT = "date_shift"
    REDACT = "redact"


def parse_date_text(text: str) -> datetime | None:
    """Parse ISO 8601 or common day/month date text; ``None`` when nothing matches."""
    stripped = text.strip()
    try:
        return datetime.fromisoformat(stripped)
    except ValueError:
        logger.debug("Date text is not ISO 8601, trying day/month layouts")
    for layout in _DATE_TEXT_FORMATS:
        try:
            return datetime.strptime(stripped, layout)
        except ValueError:
            continue
    return None


@dataclass(frozen=True)
class DateAgeMaskRule(SeededMaskRule):
    """Generalize dates of birth and ages.

    Modes:
        * ``YEAR_ONLY`` keeps the year: ``1990-03-15`` becomes ``1990-**-**``
        * ``DATE_SHIFT`` moves the date up to ``days_range`` days either way
        * ``REDACT`` replaces the value with ``[REDACTED]``

    ``date``/``datetime`` values and date text are accepted. Shifted dates
    keep their type; shifted text is rendered as ``YYYY-MM-DD``. Text that
    does not parse as a date is returned unchanged.

    :meth:`apply_age` reports ages of 90 and over as ``90+``, or maps every
    age to a band when ``age_bucketing`` is set.
    """

    category: ClassVar[RuleCategory] = RuleCategory.ANY

    mode: DateAgeMode = DateAgeMode.YEAR_ONLY
    days_range: int = 180
    age_bucketing: bool = False
    age_breaks: tuple[int, ...] = HIPAA_AGE_BREAKS
    age_labels: tuple[str, ...] = HIPAA_AGE_LABELS
    mask_char: str = "*"
    separator: str = "-"
    _age_buckets: BucketizeRule = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        coerce_enum(self, "mode", DateAgeMode, self.mode)
        require_non_negative(self.name, "days_range", self.days_range)
        require_mask_char(self.name, self.mask_char)
        if not isinstance(self.separator, str):
            raise create_rule_configuration_error(self.name, "separator", self.separator, "must be a string")
        object.__setattr__(self, "_age_buckets", BucketizeRule(tuple(self.age_breaks), tuple(self.age_labels)))

    def apply(self, value: date | str | None) -> date | str | None:
        if value is None:
            return None
        if isinstance(value, str):
            if not value.strip():
                return value
            parsed = parse_date_text(value)
            if parsed is None:
                logger.debug("Value is not a recognizable date, leaving value unchanged")
                return value
        elif isinstance(value, date):
            parsed = value
        else:
            raise ValueConversionError(
                f"{self.name} expects a date or date text, got {type(value).__name__}", rule=self.name
            )

        if self.mode is DateAgeMode.REDACT:
            return "[REDACTED]"
        if self.mode is DateAgeMode.YEAR_ONLY:
            hidden = self.mask_char * 2
            return f"{parsed.year:04d}{self.separator}{hidden}{self.separator}{hidden}"

        shifted = parsed
        if self.days_range:
            shifted = parsed + timedelta(days=self._random(value).randint(-self.days_range, self.days_range))
        return shifted.strftime("%Y-%m-%d") if isinstance(value, str) else shifted

    def apply_age(self, age: int) -> str:
        """Generalize an age in years."""
        if self.age_bucketing:
            return self._age_buckets.apply(age)
        return "90+" if age >= 90 else str(age)

    def mask_age_from_birth(self, date_of_birth: date, reference: date | None = None) -> str:
        """Compute the age at ``reference`` (default today) and generalize it."""
        reference = reference or date.today()
        age = reference.year - date_of_birth.year
        if (reference.month, reference.day) < (date_of_birth.month, date_of_birth.day):
            age -= 1
        return self.apply_age(age)
