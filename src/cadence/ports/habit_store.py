"""Habit storage interface."""

from typing import Callable, Protocol

from cadence.core.habits import Habit


class HabitStore(Protocol):
    """Interface for persisting habits in any backend."""

    def save(self, habit: Habit) -> str:
        ...

    def fetch(self, habit_id: str) -> Habit | None:
        ...

    def delete(self, habit_id: str) -> None:
        ...

    def list(self, filter: Callable[[Habit], bool] | None = None) -> list[Habit]:
        ...
