"""Occurrence expansion - pure functions over a rule, an anchor and a window."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Iterator, assert_never

from .calendar_math import (
    add_units,
    days_in_month,
    is_same_day,
    start_of_day,
    start_of_week,
    truncate_to_minute,
    units_between,
)
from .frequency import Frequency
from .recurrence import RecurrenceRule

# Cursor advances allowed per call. Covers a century of daily occurrences
# inside the requested window.
MAX_STEPS = 50_000


@dataclass(frozen=True)
class Occurrence:
    """One concrete instant of something that repeats."""

    owner_id: str
    date: datetime


def generate_occurrences(
    rule: RecurrenceRule | None,
    anchor: datetime,
    range_start: datetime,
    range_end: datetime,
    max_steps: int = MAX_STEPS,
) -> list[datetime]:
    """
    Expand a rule into the dates that fall inside [range_start, range_end].

    Pure function - no I/O.

    Weekly rules with days_of_week expand every cursor week into each
    configured weekday; monthly rules with day_of_month move each cursor to
    that day (clamped to the month's length). Candidates before the anchor,
    outside the window, or on/after the rule's end_date are dropped. A rule
    with a count stops after that many candidates counted from the anchor,
    so a window that starts later sees only what is left of them.

    Args:
        rule: The recurrence rule, or None for a one-off item
        anchor: The rule's first scheduled instant
        range_start: Window start (inclusive)
        range_end: Window end (inclusive)
        max_steps: Upper bound on cursor advances; when hit, the dates found
            so far are returned

    Returns:
        Ascending dates, at most one per (year, month, day, hour, minute)
    """
    if rule is None:
        return [anchor] if range_start <= anchor <= range_end else []

    seen: set[tuple[int, int, int, int, int]] = set()
    found: list[datetime] = []
    for candidate in _walk(rule, anchor, range_start, range_end, max_steps):
        if candidate < range_start or candidate > range_end:
            continue
        if rule.end_date is not None and candidate >= rule.end_date:
            continue
        key = truncate_to_minute(candidate)
        if key in seen:
            continue
        seen.add(key)
        found.append(candidate)

    return sorted(found)


def _walk(
    rule: RecurrenceRule,
    anchor: datetime,
    range_start: datetime,
    range_end: datetime,
    max_steps: int,
) -> Iterator[datetime]:
    """Yield candidate dates cursor by cursor, stopping past the window, end date or count."""
    interval = max(1, rule.interval)
    # counted rules walk from the anchor so every instance is counted
    if rule.count is None:
        index = _first_index(rule.frequency, interval, anchor, range_start)
    else:
        index = 0
    remaining = rule.count

    for _ in range(max(0, max_steps)):
        try:
            cursor = add_units(anchor, rule.frequency, index * interval)
        except (OverflowError, ValueError):
            # past datetime.max
            return
        floor = _earliest_candidate(rule, cursor)
        if floor > range_end:
            return
        if rule.end_date is not None and floor >= rule.end_date:
            return
        for candidate in _candidates(rule, anchor, cursor):
            yield candidate
            if remaining is not None:
                remaining -= 1
                if remaining == 0:
                    return
        index += 1


def _earliest_candidate(rule: RecurrenceRule, cursor: datetime) -> datetime:
    """Lower bound of the dates a cursor can expand to."""
    if rule.frequency is Frequency.WEEKLY and rule.days_of_week:
        return start_of_week(cursor)
    if rule.frequency is Frequency.MONTHLY and rule.day_of_month is not None:
        return start_of_day(cursor).replace(day=1)
    return cursor


def _first_index(frequency: Frequency, interval: int, anchor: datetime, range_start: datetime) -> int:
    """
    Cursor index to start walking from.

    Lands one step before the window so that weekly/monthly expansion of the
    preceding cursor still gets a chance to reach range_start.
    """
    if range_start <= anchor:
        return 0
    return max(0, units_between(anchor, range_start, frequency) // interval - 1)


def _candidates(rule: RecurrenceRule, anchor: datetime, cursor: datetime) -> Iterator[datetime]:
    match rule.frequency:
        case Frequency.WEEKLY if rule.days_of_week:
            week_start = start_of_week(cursor)
            time_of_day = cursor - start_of_day(cursor)
            for weekday in rule.days_of_week:
                candidate = week_start + timedelta(days=weekday - 1) + time_of_day
                if candidate >= anchor:
                    yield candidate
        case Frequency.MONTHLY if rule.day_of_month is not None:
            day = min(rule.day_of_month, days_in_month(cursor.year, cursor.month))
            candidate = cursor.replace(day=day)
            if candidate >= anchor:
                yield candidate
        case Frequency.DAILY | Frequency.WEEKLY | Frequency.MONTHLY | Frequency.YEARLY:
            yield cursor
        case _:
            assert_never(rule.frequency)


def expand_occurrences(
    owner_id: str,
    rule: RecurrenceRule | None,
    anchor: datetime,
    range_start: datetime,
    range_end: datetime,
    max_steps: int = MAX_STEPS,
) -> list[Occurrence]:
    """Same as generate_occurrences, tagged with the owner's id."""
    return [
        Occurrence(owner_id=owner_id, date=d)
        for d in generate_occurrences(rule, anchor, range_start, range_end, max_steps)
    ]


def occurs_on(rule: RecurrenceRule | None, anchor: datetime, day: datetime) -> bool:
    """Whether the rule has an instance on the calendar day of `day`."""
    day_start = start_of_day(day)
    day_end = day_start + timedelta(days=1) - timedelta(microseconds=1)
    return any(
        is_same_day(d, day)
        for d in generate_occurrences(rule, anchor, day_start, day_end)
    )


def merge_occurrences(groups: Iterable[list[Occurrence]]) -> list[Occurrence]:
    """Flatten several owners' occurrences, ordered by date then owner id."""
    merged = [o for group in groups for o in group]
    return sorted(merged, key=lambda o: (o.date, o.owner_id))
