"""JSON file storage adapters for tasks and habits."""

import json
import logging
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Callable, Generic, TypeVar

from cadence.core.habits import Habit
from cadence.core.tasks import Task

logger = logging.getLogger(__name__)

T = TypeVar("T", Task, Habit)


class StoreError(RuntimeError):
    """Raised when a store file cannot be read or written."""


class _JsonFileStore(Generic[T]):
    """
    One JSON object per file, keyed by record id.

    A missing file is an empty store. Writes go to a sibling temp file that
    then replaces the original.
    """

    record_type: type[T]

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt store file {self.path}: {e}")
            raise StoreError(f"{self.path} is not valid JSON") from e
        except OSError as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} does not contain a JSON object")
        return data

    def _dump(self, records: dict[str, dict]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(records, indent=2, sort_keys=True))
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e

    def save(self, record: T) -> str:
        """Insert or update a record, assigning an id when it has none."""
        if not record.id:
            record = replace(record, id=uuid.uuid4().hex)
        records = self._load()
        records[record.id] = record.to_dict()
        self._dump(records)
        logger.debug(f"Saved {self.record_type.__name__} {record.id} to {self.path}")
        return record.id

    def fetch(self, record_id: str) -> T | None:
        data = self._load().get(record_id)
        if data is None:
            return None
        return self.record_type.from_dict(data)

    def delete(self, record_id: str) -> None:
        records = self._load()
        if records.pop(record_id, None) is None:
            return
        self._dump(records)
        logger.debug(f"Deleted {self.record_type.__name__} {record_id}")

    def list(self, filter: Callable[[T], bool] | None = None) -> list[T]:
        items = [self.record_type.from_dict(data) for data in self._load().values()]
        if filter is None:
            return items
        return [item for item in items if filter(item)]


class JsonTaskStore(_JsonFileStore[Task]):
    """Implements TaskStore protocol."""

    record_type = Task


class JsonHabitStore(_JsonFileStore[Habit]):
    """Implements HabitStore protocol."""

    record_type = Habit
