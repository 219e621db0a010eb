"""Resolve date-valued operator arguments into concrete datetimes.

Supported forms, tried in order:

- relative offsets: ``-7d``, ``-24h``, ``-2w``, ``-1m``, ``-1y``
- natural dates: ``today``, ``yesterday``, ``last week``, ``this month``, ...
- absolute dates: ISO 8601 and anything :mod:`dateutil` can read
- ranges: ``2023-01-01-2023-12-31`` (two absolute dates joined by ``-``)

"Now" comes from an injectable clock so results are reproducible in tests.
Naive datetimes are local time. ``this week`` starts on Sunday.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

RELATIVE_DATE_PATTERN = re.compile(r"^-(\d+)([hdwmy])$", re.IGNORECASE)

# Hyphens allowed in a non-ISO absolute date, as in "15-Jun-2024".
_MAX_DATE_SEPARATORS = 2


@dataclass(frozen=True, slots=True)
class DateRange:
    """An inclusive pair of instants."""

    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class DateResolution:
    """Result of :func:`resolve_date`. Exactly one field is set."""

    date: datetime | None = None
    date_range: DateRange | None = None


def _now(clock: Clock | None) -> datetime:
    return (clock or datetime.now)()


def _midnight(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _start_of_week(now: datetime) -> datetime:
    # weekday() counts from Monday; shift so Sunday is day 0
    return now - timedelta(days=(now.weekday() + 1) % 7)


# Every natural date is normalized to local midnight after evaluation.
NATURAL_DATES: dict[str, Callable[[datetime], datetime]] = {
    "today": lambda now: now,
    "yesterday": lambda now: now - timedelta(days=1),
    "tomorrow": lambda now: now + timedelta(days=1),
    "last week": lambda now: now - timedelta(weeks=1),
    "last month": lambda now: now - relativedelta(months=1),
    "last year": lambda now: now - relativedelta(years=1),
    "this week": _start_of_week,
    "this month": lambda now: now.replace(day=1),
    "this year": lambda now: now.replace(month=1, day=1),
}


def resolve_relative_date(amount: int, unit: str, *, clock: Clock | None = None) -> datetime:
    """Subtract ``amount`` units from the current instant.

    Months and years shift the calendar field (``2024-03-31 - 1m`` is
    ``2024-02-29``) rather than a fixed number of days.

    Args:
        amount: Number of units to go back.
        unit: One of ``h``, ``d``, ``w``, ``m``, ``y`` (case-insensitive).
        clock: Source of "now"; defaults to :meth:`datetime.now`.

    Raises:
        ValueError: If ``unit`` is not a known unit.
    """
    now = _now(clock)
    unit = unit.lower()

    if unit == "h":
        return now - timedelta(hours=amount)
    if unit == "d":
        return now - timedelta(days=amount)
    if unit == "w":
        return now - timedelta(weeks=amount)
    if unit == "m":
        return now - relativedelta(months=amount)
    if unit == "y":
        return now - relativedelta(years=amount)
    raise ValueError(f"Unknown relative date unit: {unit!r}")


def parse_absolute_date(value: str, *, clock: Clock | None = None) -> datetime | None:
    """Parse a calendar date or date-time literal.

    Missing fields default to January 1st of the current year at midnight,
    so ``2023`` is ``2023-01-01`` and ``June 2024`` is ``2024-06-01``.
    """
    value = value.strip()
    if not value:
        return None

    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass

    # dateutil reads extra "-NN" groups as UTC offsets, which would swallow ranges
    if value.count("-") > _MAX_DATE_SEPARATORS:
        return None

    default = _midnight(_now(clock)).replace(month=1, day=1)
    try:
        return dateutil_parser.parse(value, default=default)
    except (ValueError, OverflowError):
        return None


def _resolve_range(value: str, clock: Clock | None) -> DateRange | None:
    # First split point (left to right) where both halves parse wins.
    for index, char in enumerate(value):
        if char != "-":
            continue
        left, right = value[:index], value[index + 1 :]
        if not left.strip() or not right.strip():
            continue
        start = parse_absolute_date(left, clock=clock)
        if start is None:
            continue
        end = parse_absolute_date(right, clock=clock)
        if end is not None:
            return DateRange(start=start, end=end)
    return None


def resolve_date(value: str, *, clock: Clock | None = None) -> DateResolution | None:
    """Resolve a date string into a single instant or a range.

    Never raises; unparsable input returns None.

    Args:
        value: The operator value, e.g. ``-7d``, ``last week``, ``2024-01-01``.
        clock: Source of "now"; defaults to :meth:`datetime.now`.

    Returns:
        A DateResolution with either ``date`` or ``date_range`` set, or None.
    """
    stripped = value.strip()
    normalized = stripped.lower()

    match = RELATIVE_DATE_PATTERN.match(normalized)
    if match:
        try:
            return DateResolution(
                date=resolve_relative_date(int(match.group(1)), match.group(2), clock=clock)
            )
        except (OverflowError, ValueError):
            logger.debug("Relative date out of range: %s", value)
            return None

    natural = NATURAL_DATES.get(normalized)
    if natural is not None:
        return DateResolution(date=_midnight(natural(_now(clock))))

    absolute = parse_absolute_date(stripped, clock=clock)
    if absolute is not None:
        return DateResolution(date=absolute)

    if "-" in stripped:
        date_range = _resolve_range(stripped, clock)
        if date_range is not None:
            return DateResolution(date_range=date_range)

    return None


def format_date_value(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DD``."""
    return value.strftime("%Y-%m-%d")
