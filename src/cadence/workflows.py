"""Shared workflow layer between the CLI and storage.

Each function takes its store and "now" explicitly, runs the pure core, and
persists the result.
"""

import logging
from datetime import datetime

from .adapters.json_store import JsonHabitStore, JsonTaskStore
from .config import Config
from .core.calendar_math import SUNDAY
from .core.habits import Habit
from .core.occurrences import MAX_STEPS, Occurrence, expand_occurrences, merge_occurrences
from .core.parser import parse_task_input
from .core.tasks import Task
from .ports import HabitStore, TaskStore

logger = logging.getLogger(__name__)


def get_task_store(config: Config) -> JsonTaskStore:
    """Resolve the task store location from config."""
    return JsonTaskStore(config.data_path / "tasks.json")


def get_habit_store(config: Config) -> JsonHabitStore:
    """Resolve the habit store location from config."""
    return JsonHabitStore(config.data_path / "habits.json")


def capture_task(text: str, store: TaskStore, now: datetime) -> Task:
    """Parse a quick-capture line and save the resulting task."""
    draft = parse_task_input(text, now)
    task = Task.from_draft(draft, now)
    task_id = store.save(task)
    logger.info(f"Captured task {task_id}: {draft.title!r}")
    return store.fetch(task_id) or task


def complete_task(task_id: str, store: TaskStore, now: datetime) -> tuple[Task, Task | None]:
    """
    Mark a task completed and schedule its next instance if it repeats.

    Returns: (completed_task, next_task_or_None)
    Raises KeyError for an unknown id.
    """
    task = store.fetch(task_id)
    if task is None:
        raise KeyError(task_id)

    done = task.complete(now)
    store.save(done)

    follow_up = done.next_recurrence()
    if follow_up is not None:
        new_id = store.save(follow_up)
        follow_up = store.fetch(new_id)
        logger.info(f"Scheduled next instance of {task_id} as {new_id}")
    return done, follow_up


def cancel_task(task_id: str, store: TaskStore) -> Task:
    """Mark a task cancelled. Recurring tasks are not rescheduled."""
    task = store.fetch(task_id)
    if task is None:
        raise KeyError(task_id)

    cancelled = task.cancel()
    store.save(cancelled)
    logger.info(f"Cancelled task {task_id}")
    return cancelled


def upcoming(
    store: TaskStore,
    start: datetime,
    end: datetime,
    max_steps: int = MAX_STEPS,
) -> list[Occurrence]:
    """Occurrences of every pending, dated task within [start, end]."""
    tasks = store.list(lambda t: t.is_pending and t.due_date is not None)
    return merge_occurrences(
        expand_occurrences(t.id, t.recurrence_rule, t.due_date, start, end, max_steps)
        for t in tasks
    )


def _fetch_habit(habit_id: str, store: HabitStore) -> Habit:
    habit = store.fetch(habit_id)
    if habit is None:
        raise KeyError(habit_id)
    return habit


def check_in_habit(
    habit_id: str,
    store: HabitStore,
    now: datetime,
    week_start: int = SUNDAY,
) -> Habit:
    """Record a completion now and persist the recomputed streak."""
    habit = _fetch_habit(habit_id, store).mark_completed(now, week_start)
    store.save(habit)
    logger.info(f"Habit {habit_id} checked in, streak {habit.streak_current} (best {habit.streak_best})")
    return habit


def undo_habit_check_in(
    habit_id: str,
    store: HabitStore,
    now: datetime,
    week_start: int = SUNDAY,
) -> Habit:
    """Remove today's completions and persist the recomputed streak."""
    habit = _fetch_habit(habit_id, store).unmark_today(now, week_start)
    store.save(habit)
    return habit
