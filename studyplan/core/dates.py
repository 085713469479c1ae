"""
StudyPlan Calendar — Local date helpers.

Every date the engine handles goes through this module. Calendar dates
(``YYYY-MM-DD``) are always read as LOCAL midnight, never as UTC, so a
deadline never shifts to the previous day in negative-offset timezones.

No I/O and no exceptions: unparseable input becomes ``None``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from datetime import date, datetime, time, timedelta

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = str | int | float | date | datetime


def parse_local_date(value: DateLike | None) -> datetime | None:
    """Parse a date-ish value into a naive local datetime.

    - "YYYY-MM-DD" → local midnight of that day, built from its components
    - int/float → epoch milliseconds
    - datetime → returned unchanged; date → local midnight of that day
    - anything else → generic parsing, aware results converted to local time

    Returns None for anything that cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    if _ISO_DAY.match(value):
        year, month, day = map(int, value.split("-"))
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def is_valid(value: datetime | date | None) -> bool:
    """Guard used before formatting a parsed value."""
    return value is not None


def to_local_date(value: DateLike | None) -> date | None:
    """Parse a date-ish value and keep only its calendar day."""
    parsed = parse_local_date(value)
    return parsed.date() if parsed is not None else None


def calendar_day(value: DateLike | None) -> date | None:
    """The calendar day a value was written for.

    Strings carrying a time component ("2024-01-05T10:00:00Z") keep the
    day in front of the ``T`` instead of being shifted to local time.
    """
    if isinstance(value, str) and "T" in value:
        value = value.split("T")[0]
    return to_local_date(value)


def date_key(value: DateLike | None) -> str | None:
    """Normalize a date-ish value to its ``yyyy-MM-dd`` map key."""
    day = calendar_day(value)
    return day.isoformat() if day is not None else None


def diff_in_days(start: DateLike, end: DateLike) -> int | None:
    """Whole days from start to end (negative when end is earlier)."""
    first = to_local_date(start)
    second = to_local_date(end)
    if first is None or second is None:
        return None
    return (second - first).days


def each_day(start: date, end: date) -> Iterator[date]:
    """Yield every day in [start, end]; nothing when end is before start."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def weekday_index(day: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6 (the recurrence convention)."""
    return (day.weekday() + 1) % 7


def start_of_week(day: date, week_starts_on: int = 0) -> date:
    offset = (weekday_index(day) - week_starts_on) % 7
    return day - timedelta(days=offset)


def month_grid(anchor: date, week_starts_on: int | None = None) -> list[date]:
    """Visible days of a month view around ``anchor``.

    Spans from the start of the week containing the 1st to the end of the
    week containing the last day of the month.
    """
    if week_starts_on is None:
        from studyplan.config import settings
        week_starts_on = settings.WEEK_STARTS_ON

    first = anchor.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    last = next_month - timedelta(days=1)

    grid_start = start_of_week(first, week_starts_on)
    grid_end = start_of_week(last, week_starts_on) + timedelta(days=6)
    return list(each_day(grid_start, grid_end))
