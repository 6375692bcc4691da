"""Task storage interface."""

from typing import Callable, Protocol

from cadence.core.tasks import Task


class TaskStore(Protocol):
    """Interface for persisting tasks in any backend."""

    def save(self, task: Task) -> str:
        """Insert or update a task. Returns its id."""
        ...

    def fetch(self, task_id: str) -> Task | None:
        """Fetch a task by id. Returns None if not found."""
        ...

    def delete(self, task_id: str) -> None:
        """Delete a task. Unknown ids are ignored."""
        ...

    def list(self, filter: Callable[[Task], bool] | None = None) -> list[Task]:
        """List tasks, optionally only those matching a predicate."""
        ...
