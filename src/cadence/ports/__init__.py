"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .habit_store import HabitStore

__all__ = [
    "TaskStore",
    "HabitStore",
]
