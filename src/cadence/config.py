"""Configuration management for Cadence."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.calendar_math import WEEKDAY_NAMES

logger = logging.getLogger(__name__)

CADENCE_HOME = Path(os.environ.get("CADENCE_HOME", Path.home() / ".cadence"))
CONFIG_FILE = CADENCE_HOME / "config" / "cadence.conf"
DATA_DIR = CADENCE_HOME / "data"


@dataclass
class Config:
    """Cadence configuration."""

    timezone: str = "UTC"
    week_start: str = "Sunday"
    data_dir: str = ""
    upcoming_days: int = 7
    max_occurrence_steps: int = 50_000

    @property
    def week_start_number(self) -> int:
        """week_start as 1=Sunday ... 7=Saturday."""
        name = self.week_start.strip().lower()
        if name in WEEKDAY_NAMES:
            return WEEKDAY_NAMES.index(name) + 1
        return 1

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR

    def now(self) -> datetime:
        """Current wall-clock time in the configured zone, as a naive datetime."""
        try:
            tz = ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self.timezone!r}, using UTC")
            tz = ZoneInfo("UTC")
        return datetime.now(tz).replace(tzinfo=None)


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}")
        return default
    if parsed < 1:
        logger.warning(f"{key.upper()} must be positive, got {parsed}")
        return default
    return parsed


def load_config(path: Path | None = None) -> Config:
    """Load configuration from cadence.conf (KEY=value lines)."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "week_start":
                if value.lower() in WEEKDAY_NAMES:
                    config.week_start = value
                else:
                    logger.warning(f"Unknown WEEK_START day: {value!r}")
            case "data_dir":
                config.data_dir = value
            case "upcoming_days":
                config.upcoming_days = _parse_int(key, value, config.upcoming_days)
            case "max_occurrence_steps":
                config.max_occurrence_steps = _parse_int(key, value, config.max_occurrence_steps)
            case _:
                logger.debug(f"Ignoring unknown config key {key.upper()}")

    return config
