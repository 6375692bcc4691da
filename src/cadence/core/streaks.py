"""Habit streak logic - pure functions of a completion history and "now"."""

from datetime import datetime, timedelta
from enum import Enum
from typing import NamedTuple, assert_never

from .calendar_math import (
    SUNDAY,
    add_units,
    is_same_day,
    start_of_day,
    start_of_period,
    start_of_week,
)
from .frequency import Frequency


class HabitCompletionStatus(Enum):
    """State of one calendar day in a habit grid."""

    COMPLETED = "completed"
    MISSED = "missed"
    PENDING = "pending"
    FUTURE = "future"


class StreakResult(NamedTuple):
    current: int
    best: int


def completion_status(
    day: datetime,
    completions: list[datetime],
    now: datetime,
) -> HabitCompletionStatus:
    """Classify a day relative to today and the completion history."""
    day_start = start_of_day(day)
    today = start_of_day(now)

    if day_start > today:
        return HabitCompletionStatus.FUTURE
    if any(is_same_day(c, day) for c in completions):
        return HabitCompletionStatus.COMPLETED
    if day_start < today:
        return HabitCompletionStatus.MISSED
    return HabitCompletionStatus.PENDING


def recalc_streak(
    completions: list[datetime],
    frequency: Frequency,
    now: datetime,
    previous_best: int = 0,
    target_per_period: int = 1,
    week_start: int = SUNDAY,
) -> StreakResult:
    """
    Recompute current and best streak.

    Daily habits count consecutive completed days ending today, or ending
    yesterday when today is not done yet. Weekly, monthly and yearly habits
    are binary: 1 when the current period has reached its target, else 0.

    Pure function - the caller persists the returned values.
    """
    match frequency:
        case Frequency.DAILY:
            current = _daily_streak(completions, now)
        case Frequency.WEEKLY | Frequency.MONTHLY | Frequency.YEARLY:
            progress = progress_in_period(completions, frequency, now, target_per_period, week_start)
            current = 1 if progress >= 1.0 else 0
        case _:
            assert_never(frequency)

    return StreakResult(current=current, best=max(previous_best, current))


def _daily_streak(completions: list[datetime], now: datetime) -> int:
    days = {start_of_day(c) for c in completions}
    check = start_of_day(now)

    if check not in days:
        check = add_units(check, Frequency.DAILY, -1)
        if check not in days:
            return 0

    streak = 0
    while check in days:
        streak += 1
        check = add_units(check, Frequency.DAILY, -1)
    return streak


def completions_in_period(
    completions: list[datetime],
    frequency: Frequency,
    now: datetime,
    week_start: int = SUNDAY,
) -> int:
    """Completions from the start of the current period up to now."""
    period_start = start_of_period(now, frequency, week_start)
    return sum(1 for c in completions if period_start <= c <= now)


def progress_in_period(
    completions: list[datetime],
    frequency: Frequency,
    now: datetime,
    target_per_period: int = 1,
    week_start: int = SUNDAY,
) -> float:
    """Share of the period target reached so far, capped at 1.0."""
    if target_per_period <= 0:
        return 0.0
    done = completions_in_period(completions, frequency, now, week_start)
    return min(1.0, done / target_per_period)


def consecutive_periods(
    completions: list[datetime],
    frequency: Frequency,
    now: datetime,
    week_start: int = SUNDAY,
) -> int:
    """
    Number of consecutive periods with at least one completion.

    Counts back from the current period; an empty current period does not
    break the run when the previous one is populated.
    """
    if not completions:
        return 0

    periods = {start_of_period(c, frequency, week_start) for c in completions}
    check = start_of_period(now, frequency, week_start)

    if check not in periods:
        check = add_units(check, frequency, -1)
        if check not in periods:
            return 0

    streak = 0
    while check in periods:
        streak += 1
        check = start_of_period(add_units(check, frequency, -1), frequency, week_start)
    return streak


def completion_rate(completions: list[datetime], days: int, now: datetime) -> float:
    """Fraction of the last `days` days (today included) with a completion."""
    if days <= 0:
        return 0.0
    first_day = start_of_day(now) - timedelta(days=days - 1)
    completed = {start_of_day(c) for c in completions}
    hits = sum(1 for offset in range(days) if first_day + timedelta(days=offset) in completed)
    return hits / days


def calendar_grid(now: datetime, weeks: int = 12) -> list[list[datetime]]:
    """Rows of seven days, Sunday first, ending with the week that contains now."""
    if weeks <= 0:
        return []
    this_week = start_of_week(now, SUNDAY)
    grid_start = this_week - timedelta(weeks=weeks - 1)
    return [
        [grid_start + timedelta(weeks=row, days=col) for col in range(7)]
        for row in range(weeks)
    ]
