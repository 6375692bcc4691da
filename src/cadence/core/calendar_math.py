"""Pure calendar arithmetic - no I/O, no clock reads.

Weekdays use the 1=Sunday ... 7=Saturday numbering throughout.
"""

import calendar
from datetime import datetime, timedelta
from typing import assert_never

from dateutil.relativedelta import relativedelta

from .frequency import Frequency

SUNDAY = 1
SATURDAY = 7

WEEKDAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def start_of_day(dt: datetime) -> datetime:
    """Midnight of the same calendar day. tzinfo is kept."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def add_units(dt: datetime, unit: Frequency, n: int) -> datetime:
    """
    Add n days/weeks/months/years.

    Day-of-month overflow clamps to the last valid day, so Jan 31 + 1 month
    is Feb 28 (or 29) and Feb 29 + 1 year is Feb 28.
    """
    match unit:
        case Frequency.DAILY:
            return dt + timedelta(days=n)
        case Frequency.WEEKLY:
            return dt + timedelta(weeks=n)
        case Frequency.MONTHLY:
            return dt + relativedelta(months=n)
        case Frequency.YEARLY:
            return dt + relativedelta(years=n)
        case _:
            assert_never(unit)


def is_same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def weekday_number(dt: datetime) -> int:
    """Weekday as 1=Sunday ... 7=Saturday."""
    # date.weekday() is 0=Monday ... 6=Sunday
    return (dt.weekday() + 1) % 7 + 1


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def start_of_week(dt: datetime, week_start: int = SUNDAY) -> datetime:
    """Start of the week containing dt, weeks beginning on week_start."""
    offset = (weekday_number(dt) - week_start) % 7
    return start_of_day(dt) - timedelta(days=offset)


def start_of_period(dt: datetime, frequency: Frequency, week_start: int = SUNDAY) -> datetime:
    """Start of the day/week/month/year containing dt."""
    match frequency:
        case Frequency.DAILY:
            return start_of_day(dt)
        case Frequency.WEEKLY:
            return start_of_week(dt, week_start)
        case Frequency.MONTHLY:
            return start_of_day(dt).replace(day=1)
        case Frequency.YEARLY:
            return start_of_day(dt).replace(month=1, day=1)
        case _:
            assert_never(frequency)


def units_between(start: datetime, end: datetime, unit: Frequency) -> int:
    """Whole calendar units from start to end (negative when end is earlier)."""
    match unit:
        case Frequency.DAILY:
            return (end.date() - start.date()).days
        case Frequency.WEEKLY:
            return (end.date() - start.date()).days // 7
        case Frequency.MONTHLY:
            return (end.year - start.year) * 12 + (end.month - start.month)
        case Frequency.YEARLY:
            return end.year - start.year
        case _:
            assert_never(unit)


def truncate_to_minute(dt: datetime) -> tuple[int, int, int, int, int]:
    """(year, month, day, hour, minute) key used to collapse duplicate instants."""
    return (dt.year, dt.month, dt.day, dt.hour, dt.minute)


def parse_iso(value: str | None) -> datetime | None:
    """Lenient ISO-8601 parse for stored values; None when empty or malformed."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
