"""Recurrence frequency - the calendar unit a rule repeats by."""

from enum import Enum


class Frequency(Enum):
    """How often a rule repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: "str | Frequency | None") -> "Frequency":
        """Case-insensitive lookup. Unknown values fall back to DAILY."""
        if isinstance(value, Frequency):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.DAILY

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def unit_name(self) -> str:
        """Singular unit noun ("day", "week", ...)."""
        return {
            Frequency.DAILY: "day",
            Frequency.WEEKLY: "week",
            Frequency.MONTHLY: "month",
            Frequency.YEARLY: "year",
        }[self]
