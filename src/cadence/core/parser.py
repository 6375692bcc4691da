"""Quick-capture parser: one line of free text -> a structured task draft.

Examples:
    "Buy milk p1 #shopping tomorrow"  -> title "Buy milk", P1, label, due tomorrow
    "Take vitamins daily"             -> title "Take vitamins", daily rule
    "Standup every monday 9:30am @work"
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from enum import IntEnum

from .calendar_math import WEEKDAY_NAMES, add_units, start_of_day, weekday_number
from .frequency import Frequency
from .recurrence import RecurrenceRule


class Priority(IntEnum):
    """Task priority; P1 is the highest."""

    P1 = 1
    P2 = 2
    P3 = 3
    P4 = 4

    @property
    def display_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class ParsedTaskDraft:
    """Structured result of parsing a quick-capture line."""

    title: str
    due_date: datetime | None = None
    priority: Priority = Priority.P4
    recurrence_rule: RecurrenceRule | None = None
    labels: tuple[str, ...] = field(default_factory=tuple)
    project: str | None = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "priority": int(self.priority),
            "recurrence_rule": self.recurrence_rule.to_dict() if self.recurrence_rule else None,
            "labels": list(self.labels),
            "project": self.project,
        }


_PRIORITY_RE = re.compile(r"^p([1-4])$", re.IGNORECASE)
_TIME_12H_RE = re.compile(r"^(\d{1,2})(?::([0-5]\d))?(am|pm)$", re.IGNORECASE)
_TIME_24H_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

_RECURRENCE_WORDS = {
    "daily": Frequency.DAILY,
    "weekly": Frequency.WEEKLY,
    "monthly": Frequency.MONTHLY,
    "yearly": Frequency.YEARLY,
}
_EVERY_UNITS = {
    "day": Frequency.DAILY,
    "week": Frequency.WEEKLY,
    "month": Frequency.MONTHLY,
    "year": Frequency.YEARLY,
}
_DAY_OFFSETS = {"yesterday": -1, "today": 0, "tomorrow": 1}


def parse_task_input(text: str, now: datetime) -> ParsedTaskDraft:
    """
    Parse a line of free text into a ParsedTaskDraft.

    Tokens are whitespace separated and matched case-insensitively in any
    order. Recognised tokens are removed from the title; when a category
    (priority, date, time, recurrence, project) appears more than once the
    last one wins. Labels accumulate. Never fails: anything unrecognised is
    title text.

    Args:
        text: The raw input line
        now: Reference instant for relative dates

    Returns:
        The draft; title is "" when every token was consumed
    """
    words = text.split()
    title_words: list[str] = []
    labels: list[str] = []
    priority = Priority.P4
    due_day: datetime | None = None
    time_of_day: time | None = None
    rule: RecurrenceRule | None = None
    project: str | None = None

    i = 0
    while i < len(words):
        word = words[i]
        lower = word.lower()
        following = words[i + 1].lower() if i + 1 < len(words) else ""

        if match := _PRIORITY_RE.match(word):
            priority = Priority(int(match.group(1)))
        elif word.startswith("#"):
            label = word[1:].lower()
            if label and label not in labels:
                labels.append(label)
        elif word.startswith("@") and len(word) > 1:
            project = word[1:]
        elif lower in _RECURRENCE_WORDS:
            rule = RecurrenceRule(_RECURRENCE_WORDS[lower])
        elif lower == "every" and following in _EVERY_UNITS:
            rule = RecurrenceRule(_EVERY_UNITS[following])
            i += 1
        elif lower == "every" and following in WEEKDAY_NAMES:
            rule = RecurrenceRule(Frequency.WEEKLY, days_of_week=(WEEKDAY_NAMES.index(following) + 1,))
            i += 1
        elif lower in _DAY_OFFSETS:
            due_day = start_of_day(now) + timedelta(days=_DAY_OFFSETS[lower])
        elif lower == "next" and following == "week":
            due_day = start_of_day(now + timedelta(days=7))
            i += 1
        elif lower == "next" and following == "month":
            due_day = start_of_day(add_units(now, Frequency.MONTHLY, 1))
            i += 1
        elif lower in WEEKDAY_NAMES:
            due_day = _next_weekday(now, WEEKDAY_NAMES.index(lower) + 1)
        elif (parsed := _parse_time(word)) is not None:
            time_of_day = parsed
        else:
            title_words.append(word)
        i += 1

    due_date = due_day
    if time_of_day is not None:
        base = due_day if due_day is not None else start_of_day(now)
        due_date = base.replace(hour=time_of_day.hour, minute=time_of_day.minute)

    return ParsedTaskDraft(
        title=" ".join(title_words),
        due_date=due_date,
        priority=priority,
        recurrence_rule=rule,
        labels=tuple(labels),
        project=project,
    )


def _next_weekday(now: datetime, weekday: int) -> datetime:
    """Start of the next day (today included) falling on the given weekday."""
    offset = (weekday - weekday_number(now)) % 7
    return start_of_day(now) + timedelta(days=offset)


def _parse_time(word: str) -> time | None:
    if match := _TIME_12H_RE.match(word):
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if not 1 <= hour <= 12:
            return None
        is_pm = match.group(3).lower() == "pm"
        if is_pm and hour < 12:
            hour += 12
        elif not is_pm and hour == 12:
            hour = 0
        return time(hour, minute)
    if match := _TIME_24H_RE.match(word):
        return time(int(match.group(1)), int(match.group(2)))
    return None


def describe(draft: ParsedTaskDraft) -> str:
    """One-line preview of a draft, e.g. for a capture confirmation."""
    parts = [f'Title: "{draft.title}"']
    if draft.due_date:
        parts.append(f"Due: {draft.due_date.strftime('%a %b %d %Y %H:%M')}")
    parts.append(f"Priority: {draft.priority.display_name}")
    if draft.labels:
        parts.append(f"Labels: {', '.join(draft.labels)}")
    if draft.recurrence_rule:
        parts.append(f"Recurrence: {draft.recurrence_rule.display_string}")
    if draft.project:
        parts.append(f"Project: {draft.project}")
    return " | ".join(parts)
