from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

DATE_KEY_FORMAT = "%Y-%m-%d"


def normalize_to_midnight(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def format_date_local(value: date | datetime) -> str:
    return normalize_to_midnight(value).isoformat()


def parse_date_local(value: str) -> date:
    return datetime.strptime(value.strip(), DATE_KEY_FORMAT).date()


def add_days(value: date | datetime, days: int) -> date:
    return normalize_to_midnight(value) + timedelta(days=days)


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole days from start to end (negative when end is earlier)."""
    return (normalize_to_midnight(end) - normalize_to_midnight(start)).days


def weekday_index(value: date | datetime) -> int:
    return normalize_to_midnight(value).weekday()


def first_weekday_of_month(year: int, month: int, weekday: int) -> date:
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset)


def anniversary(anchor: date, year: int) -> date:
    """Same month/day as anchor in the given year.

    Feb 29 rolls over to Mar 1 when the target year is not a leap year.
    """
    if anchor.month == 2 and anchor.day == 29 and not calendar.isleap(year):
        return date(year, 3, 1)
    return date(year, anchor.month, anchor.day)


def iter_days(start: date | datetime, days: int):
    """Yield start .. start + days, both ends included."""
    current = normalize_to_midnight(start)
    for offset in range(days + 1):
        yield current + timedelta(days=offset)
