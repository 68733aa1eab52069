"""
Period bucketing for the equity curve.

Maps a local civil date to the first day of its daily / weekly / monthly /
quarterly / yearly bucket, labels buckets for charts, and walks buckets
forward with calendar arithmetic (month and year steps respect variable
month lengths and leap years).

Dates are treated as naive calendar dates throughout; no UTC conversion
happens anywhere, so a trade logged late in the evening never slides into
the neighbouring day.
"""

import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

from shared.constants import INVALID_PERIOD, MAX_TIMELINE_PERIODS, START_KEY, START_LABELS
from shared.exceptions import InvalidFrequencyError

logger = logging.getLogger(__name__)


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Language(str, Enum):
    EN = "en"
    ZH = "zh"


_STEPS = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.YEARLY: relativedelta(years=1),
}


def to_frequency(value) -> Frequency:
    """Coerce a ``Frequency`` or its string value; raise on anything else."""
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).strip().lower())
    except ValueError:
        raise InvalidFrequencyError(f"Unknown frequency: {value!r}") from None


def to_language(value) -> Language:
    """Coerce a label language, defaulting to English for unknown values."""
    if isinstance(value, Language):
        return value
    try:
        return Language(str(value).strip().lower())
    except ValueError:
        logger.debug(f"Unknown language {value!r}, using 'en'")
        return Language.EN


def parse_date(value) -> Optional[date]:
    """
    Parse a trade date into a calendar date.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and ISO
    datetime strings (the date part is kept as written).

    Returns:
        The date, or None when the value is not a parseable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def period_start(value, frequency) -> Optional[date]:
    """
    Return the first day of the bucket containing *value*.

    - daily:     the date itself
    - weekly:    the Monday of that week (Sunday rolls back 6 days)
    - monthly:   the 1st of the month
    - quarterly: the 1st of Jan / Apr / Jul / Oct
    - yearly:    Jan 1

    Returns None for an unparseable date.
    """
    freq = to_frequency(frequency)
    d = parse_date(value)
    if d is None:
        return None

    if freq is Frequency.DAILY:
        return d
    if freq is Frequency.WEEKLY:
        return d - timedelta(days=d.weekday())
    if freq is Frequency.MONTHLY:
        return d.replace(day=1)
    if freq is Frequency.QUARTERLY:
        return d.replace(month=(d.month - 1) // 3 * 3 + 1, day=1)
    return d.replace(month=1, day=1)


def period_key(value, frequency) -> str:
    """Canonical ``YYYY-MM-DD`` bucket key, or ``INVALID_PERIOD`` for bad dates."""
    start = period_start(value, frequency)
    return start.isoformat() if start is not None else INVALID_PERIOD


def advance(cursor: date, frequency, steps: int = 1) -> date:
    """Move a bucket-start cursor by *steps* periods (negative steps go back)."""
    return cursor + _STEPS[to_frequency(frequency)] * steps


def try_advance(cursor: date, frequency, steps: int = 1) -> Optional[date]:
    """Like ``advance`` but returns None when the step leaves the supported calendar (years 1..9999)."""
    try:
        return advance(cursor, frequency, steps)
    except (ValueError, OverflowError):
        return None


def period_range(
    first: date,
    last: date,
    frequency,
    max_periods: int = MAX_TIMELINE_PERIODS,
) -> Iterator[date]:
    """
    Yield every bucket start from *first*'s bucket through *last*'s bucket.

    Gaps are never skipped.  The walk stops after *max_periods* buckets no
    matter how far apart the bounds are.
    """
    freq = to_frequency(frequency)
    cursor = period_start(first, freq)
    end = period_start(last, freq)

    emitted = 0
    while cursor <= end:
        if emitted >= max_periods:
            logger.warning(
                f"Timeline truncated after {max_periods} {freq.value} periods "
                f"(stopped at {cursor.isoformat()}, wanted {end.isoformat()})"
            )
            return
        yield cursor
        emitted += 1
        cursor = try_advance(cursor, freq)
        if cursor is None:
            # last bucket before the end of the calendar
            return


def period_label(key: str, frequency, language=Language.EN) -> str:
    """
    Human-readable label for a bucket key.

    The Start anchor gets a localized label, daily buckets render as
    ``MM/DD``, everything else is the raw key.
    """
    if not key:
        return ""
    if key == START_KEY:
        return START_LABELS[to_language(language).value]
    if to_frequency(frequency) is Frequency.DAILY:
        parts = key.split("-")
        if len(parts) == 3:
            return f"{parts[1]}/{parts[2]}"
    return key
