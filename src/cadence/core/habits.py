"""Habit record - pure, every change returns a new Habit."""

from dataclasses import dataclass, field, replace
from datetime import datetime

from .calendar_math import SUNDAY, is_same_day, parse_iso
from .recurrence import RecurrenceRule
from .streaks import HabitCompletionStatus, completion_status, recalc_streak


@dataclass(frozen=True)
class Habit:
    """A habit with a per-period completion target."""

    id: str | None
    name: str
    recurrence_rule: RecurrenceRule = field(default_factory=RecurrenceRule.daily)
    target_per_period: int = 1
    streak_current: int = 0
    streak_best: int = 0
    completion_dates: tuple[datetime, ...] = field(default_factory=tuple)
    created_at: datetime | None = None
    archived: bool = False

    @property
    def target_description(self) -> str:
        unit = self.recurrence_rule.frequency.unit_name
        if self.target_per_period == 1:
            return f"Once per {unit}"
        return f"{self.target_per_period}x per {unit}"

    def is_completed_on(self, day: datetime) -> bool:
        return any(is_same_day(c, day) for c in self.completion_dates)

    def with_streak(self, now: datetime, week_start: int = SUNDAY) -> "Habit":
        """Copy with streak_current/streak_best recomputed as of now."""
        result = recalc_streak(
            list(self.completion_dates),
            self.recurrence_rule.frequency,
            now,
            previous_best=self.streak_best,
            target_per_period=self.target_per_period,
            week_start=week_start,
        )
        return replace(self, streak_current=result.current, streak_best=result.best)

    def mark_completed(self, now: datetime, week_start: int = SUNDAY) -> "Habit":
        updated = replace(self, completion_dates=self.completion_dates + (now,))
        return updated.with_streak(now, week_start)

    def unmark_today(self, now: datetime, week_start: int = SUNDAY) -> "Habit":
        remaining = tuple(c for c in self.completion_dates if not is_same_day(c, now))
        return replace(self, completion_dates=remaining).with_streak(now, week_start)

    def status_for(self, day: datetime, now: datetime) -> HabitCompletionStatus:
        return completion_status(day, list(self.completion_dates), now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "recurrence_rule": self.recurrence_rule.to_dict(),
            "target_per_period": self.target_per_period,
            "streak_current": self.streak_current,
            "streak_best": self.streak_best,
            "completion_dates": [c.isoformat() for c in self.completion_dates],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "archived": self.archived,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Habit":
        """Create Habit from stored JSON data. A missing rule means daily."""
        rule = data.get("recurrence_rule")
        dates = (parse_iso(d) for d in data.get("completion_dates") or [])
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            recurrence_rule=RecurrenceRule.from_dict(rule) if rule else RecurrenceRule.daily(),
            target_per_period=_int_field(data, "target_per_period", 1),
            streak_current=_int_field(data, "streak_current", 0),
            streak_best=_int_field(data, "streak_best", 0),
            completion_dates=tuple(d for d in dates if d is not None),
            created_at=parse_iso(data.get("created_at")),
            archived=bool(data.get("archived", False)),
        )


def _int_field(data: dict, key: str, default: int) -> int:
    try:
        return int(data.get(key, default))
    except (TypeError, ValueError):
        return default
