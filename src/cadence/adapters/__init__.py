"""Adapters - I/O implementations of ports."""

from .json_store import JsonHabitStore, JsonTaskStore, StoreError

__all__ = [
    "JsonTaskStore",
    "JsonHabitStore",
    "StoreError",
]
