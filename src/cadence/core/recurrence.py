"""Recurrence rule model and RRULE interop - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime

from .calendar_math import add_units, parse_iso
from .frequency import Frequency

_WEEKDAY_SYMBOLS = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")
_UNTIL_FORMATS = ("%Y%m%dT%H%M%SZ", "%Y%m%dT%H%M%S", "%Y%m%d")


@dataclass(frozen=True)
class RecurrenceRule:
    """
    A repeating schedule: every `interval` units of `frequency`.

    days_of_week (1=Sunday ... 7=Saturday) only matters for weekly rules and
    day_of_month only for monthly rules. Occurrences on or after end_date
    are excluded, and count caps the total number of occurrences counted
    from the anchor. Invalid values are clamped rather than rejected.
    """

    frequency: Frequency
    interval: int = 1
    days_of_week: tuple[int, ...] | None = None
    day_of_month: int | None = None
    end_date: datetime | None = None
    count: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "frequency", Frequency.parse(self.frequency))
        object.__setattr__(self, "interval", _clamp_interval(self.interval))
        if self.days_of_week is not None:
            days = tuple(sorted({d for d in self.days_of_week if 1 <= d <= 7}))
            object.__setattr__(self, "days_of_week", days or None)
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            object.__setattr__(self, "day_of_month", None)
        if self.count is not None and self.count < 1:
            object.__setattr__(self, "count", None)

    @classmethod
    def daily(cls) -> "RecurrenceRule":
        return cls(Frequency.DAILY)

    @classmethod
    def weekly(cls) -> "RecurrenceRule":
        return cls(Frequency.WEEKLY)

    @classmethod
    def monthly(cls) -> "RecurrenceRule":
        return cls(Frequency.MONTHLY)

    @classmethod
    def yearly(cls) -> "RecurrenceRule":
        return cls(Frequency.YEARLY)

    @property
    def display_string(self) -> str:
        """Human-readable form, e.g. "Weekly" or "Every 3 months"."""
        if self.interval == 1:
            return self.frequency.display_name
        return f"Every {self.interval} {self.frequency.unit_name}s"

    def next_occurrence(self, after: datetime) -> datetime:
        """The date one interval after `after`."""
        return add_units(after, self.frequency, self.interval)

    def to_dict(self) -> dict:
        """Flat JSON-friendly mapping; optional fields are None when unset."""
        return {
            "frequency": self.frequency.value,
            "interval": self.interval,
            "days_of_week": list(self.days_of_week) if self.days_of_week else None,
            "day_of_month": self.day_of_month,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "count": self.count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RecurrenceRule":
        """Build a rule from stored data, clamping anything invalid."""
        days = data.get("days_of_week")
        days_of_week = None
        if isinstance(days, list):
            days_of_week = tuple(d for d in days if isinstance(d, int))

        day_of_month = data.get("day_of_month")
        if not isinstance(day_of_month, int):
            day_of_month = None

        count = data.get("count")
        if not isinstance(count, int):
            count = None

        return cls(
            frequency=Frequency.parse(data.get("frequency")),
            interval=data.get("interval", 1),
            days_of_week=days_of_week,
            day_of_month=day_of_month,
            end_date=parse_iso(data.get("end_date")),
            count=count,
        )


def _clamp_interval(value) -> int:
    try:
        interval = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, interval)


def parse_rrule(text: str) -> RecurrenceRule | None:
    """
    Parse an RFC 5545 style RRULE string.

    Accepts "RRULE:FREQ=WEEKLY;BYDAY=MO,WE" or the bare "FREQ=..." form.
    FREQ is required; returns None when it is missing or unknown.
    COUNT must be a positive integer to count. BYMONTH and other parts are
    ignored.
    """
    if "RRULE:" in text.upper():
        text = text[text.upper().index("RRULE:") + len("RRULE:"):]

    params: dict[str, str] = {}
    for component in text.strip().split(";"):
        parts = component.split("=")
        if len(parts) != 2:
            continue
        params[parts[0].strip().upper()] = parts[1].strip()

    freq = params.get("FREQ", "").lower()
    if freq not in {f.value for f in Frequency}:
        return None

    days_of_week = None
    if "BYDAY" in params:
        days = []
        for entry in params["BYDAY"].split(","):
            # "1MO" (first Monday) keeps only the weekday part
            symbol = "".join(c for c in entry if c.isalpha()).upper()
            if symbol in _WEEKDAY_SYMBOLS:
                days.append(_WEEKDAY_SYMBOLS.index(symbol) + 1)
        days_of_week = tuple(days)

    day_of_month = None
    for entry in params.get("BYMONTHDAY", "").split(","):
        try:
            value = int(entry)
        except ValueError:
            continue
        if 1 <= value <= 31:
            day_of_month = value
            break

    return RecurrenceRule(
        frequency=Frequency(freq),
        interval=params.get("INTERVAL", 1),
        days_of_week=days_of_week,
        day_of_month=day_of_month,
        end_date=_parse_until(params.get("UNTIL", "")),
        count=_parse_count(params.get("COUNT", "")),
    )


def _parse_count(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_until(value: str) -> datetime | None:
    for fmt in _UNTIL_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def to_rrule(rule: RecurrenceRule) -> str:
    """Render a rule as "FREQ=...;INTERVAL=..." text (no RRULE: prefix)."""
    parts = [f"FREQ={rule.frequency.value.upper()}"]
    if rule.interval != 1:
        parts.append(f"INTERVAL={rule.interval}")
    if rule.days_of_week:
        parts.append("BYDAY=" + ",".join(_WEEKDAY_SYMBOLS[d - 1] for d in rule.days_of_week))
    if rule.day_of_month is not None:
        parts.append(f"BYMONTHDAY={rule.day_of_month}")
    if rule.end_date is not None:
        parts.append(f"UNTIL={rule.end_date.strftime('%Y%m%dT%H%M%S')}")
    if rule.count is not None:
        parts.append(f"COUNT={rule.count}")
    return ";".join(parts)
