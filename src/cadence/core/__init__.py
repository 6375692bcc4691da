"""Functional core - pure recurrence, streak and parsing logic with no I/O."""

from .frequency import Frequency
from .recurrence import RecurrenceRule, parse_rrule, to_rrule
from .occurrences import Occurrence, generate_occurrences, expand_occurrences, occurs_on
from .streaks import HabitCompletionStatus, StreakResult, recalc_streak, completion_status
from .parser import ParsedTaskDraft, Priority, parse_task_input
from .tasks import Task
from .habits import Habit

__all__ = [
    # Rules
    "Frequency",
    "RecurrenceRule",
    "parse_rrule",
    "to_rrule",
    # Occurrences
    "Occurrence",
    "generate_occurrences",
    "expand_occurrences",
    "occurs_on",
    # Streaks
    "HabitCompletionStatus",
    "StreakResult",
    "recalc_streak",
    "completion_status",
    # Parsing
    "ParsedTaskDraft",
    "Priority",
    "parse_task_input",
    # Records
    "Task",
    "Habit",
]
