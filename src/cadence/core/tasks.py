"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from .calendar_math import add_units, parse_iso
from .occurrences import generate_occurrences
from .parser import ParsedTaskDraft, Priority
from .recurrence import RecurrenceRule

PENDING = "pending"
COMPLETED = "completed"
CANCELLED = "cancelled"


@dataclass(frozen=True)
class Task:
    """A to-do item as handed to storage."""

    id: str | None
    title: str
    priority: Priority = Priority.P4
    due_date: datetime | None = None
    labels: tuple[str, ...] = field(default_factory=tuple)
    recurrence_rule: RecurrenceRule | None = None
    project: str | None = None
    status: str = PENDING
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_rule is not None

    @property
    def is_pending(self) -> bool:
        return self.status == PENDING

    def is_overdue(self, now: datetime) -> bool:
        """Pending and due before now."""
        return self.is_pending and self.due_date is not None and self.due_date < now

    def complete(self, now: datetime) -> "Task":
        return replace(self, status=COMPLETED, completed_at=now)

    def cancel(self) -> "Task":
        """Drop the task without completing it; no follow-up is scheduled."""
        return replace(self, status=CANCELLED)

    def next_recurrence(self) -> "Task | None":
        """
        The follow-up instance of a recurring task.

        The new due date is the rule's first occurrence after the current
        one, so weekday and day-of-month rules land where the occurrence
        expansion puts them. A counted rule hands the follow-up one fewer
        remaining instance.

        None when the task does not repeat, has no due date, has used up its
        count, or the next date falls on/after the rule's end date.
        """
        rule = self.recurrence_rule
        if rule is None or self.due_date is None:
            return None
        if rule.count is not None and rule.count <= 1:
            return None

        try:
            horizon = add_units(self.due_date, rule.frequency, rule.interval + 1)
        except (OverflowError, ValueError):
            return None
        following = generate_occurrences(
            replace(rule, count=None),
            self.due_date,
            self.due_date + timedelta(microseconds=1),
            horizon,
        )
        if not following:
            return None

        if rule.count is not None:
            rule = replace(rule, count=rule.count - 1)
        return replace(
            self,
            id=None,
            due_date=following[0],
            recurrence_rule=rule,
            status=PENDING,
            completed_at=None,
        )

    @classmethod
    def from_draft(cls, draft: ParsedTaskDraft, now: datetime) -> "Task":
        return cls(
            id=None,
            title=draft.title,
            priority=draft.priority,
            due_date=draft.due_date,
            labels=draft.labels,
            recurrence_rule=draft.recurrence_rule,
            project=draft.project,
            created_at=now,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "priority": int(self.priority),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "labels": list(self.labels),
            "recurrence_rule": self.recurrence_rule.to_dict() if self.recurrence_rule else None,
            "project": self.project,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from stored JSON data."""
        try:
            priority = Priority(int(data.get("priority", Priority.P4)))
        except (TypeError, ValueError):
            priority = Priority.P4
        rule = data.get("recurrence_rule")
        return cls(
            id=data.get("id"),
            title=data.get("title", ""),
            priority=priority,
            due_date=parse_iso(data.get("due_date")),
            labels=tuple(data.get("labels") or ()),
            recurrence_rule=RecurrenceRule.from_dict(rule) if rule else None,
            project=data.get("project"),
            status=data.get("status") or PENDING,
            created_at=parse_iso(data.get("created_at")),
            completed_at=parse_iso(data.get("completed_at")),
        )


def filter_pending(tasks: list[Task]) -> list[Task]:
    return [t for t in tasks if t.is_pending]


def filter_due_between(tasks: list[Task], start: datetime, end: datetime) -> list[Task]:
    """Tasks with a due date inside [start, end]."""
    return [t for t in tasks if t.due_date is not None and start <= t.due_date <= end]


def sort_by_priority(tasks: list[Task]) -> list[Task]:
    """
    Sort tasks by priority (P1 first) then due date (undated last).

    Pure function - no I/O.
    """

    def sort_key(t: Task) -> tuple[int, bool, datetime]:
        return (int(t.priority), t.due_date is None, t.due_date or datetime.max)

    return sorted(tasks, key=sort_key)
