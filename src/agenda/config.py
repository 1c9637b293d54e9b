"""Configuration management for Agenda."""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import time, timedelta
from pathlib import Path

from .core.events import Coordinate
from .core.settings import Settings

logger = logging.getLogger(__name__)

AGENDA_HOME = Path(os.environ.get("AGENDA_HOME", Path.home() / "agenda"))
CONFIG_FILE = AGENDA_HOME / "config" / "agenda.conf"


def parse_hours(value: str) -> tuple[time, time]:
    """Parse ``"HH:MM-HH:MM"``. Raises ValueError on malformed input."""
    start_str, sep, end_str = value.partition("-")
    if not sep:
        raise ValueError(f"Invalid hours range: {value!r}")
    start = time.fromisoformat(start_str.strip())
    end = time.fromisoformat(end_str.strip())
    if end <= start:
        raise ValueError(f"Hours range ends before it starts: {value!r}")
    return start, end


@dataclass
class Config:
    """Agenda configuration."""

    timezone: str = ""
    work_hours: str = "09:00-17:00"
    slot_step_minutes: int = 30
    suggestion_duration_minutes: int = 120
    light_day_threshold: int = 3
    upcoming_days: int = 7
    events_file: str = ""
    # Reminder delivery
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)
    # Current location
    location_lookup_url: str = ""
    location_latitude: float | None = None
    location_longitude: float | None = None

    def settings(self) -> Settings:
        """Engine settings derived from this config."""
        work_start, work_end = parse_hours(self.work_hours)
        return Settings(
            work_start=work_start,
            work_end=work_end,
            slot_step=timedelta(minutes=self.slot_step_minutes),
            suggestion_duration=timedelta(minutes=self.suggestion_duration_minutes),
            light_day_threshold=self.light_day_threshold,
            upcoming_days=self.upcoming_days,
        )

    def fixed_coordinate(self) -> Coordinate | None:
        if self.location_latitude is None or self.location_longitude is None:
            return None
        return Coordinate(self.location_latitude, self.location_longitude)


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key.upper()}: {value!r}")
        return default


def _float(key: str, value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key.upper()}: {value!r}")
        return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from agenda.conf file."""
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
            case "work_hours":
                config.work_hours = value
            case "slot_step_minutes":
                config.slot_step_minutes = _int(key, value, config.slot_step_minutes)
            case "suggestion_duration_minutes":
                config.suggestion_duration_minutes = _int(key, value, config.suggestion_duration_minutes)
            case "light_day_threshold":
                config.light_day_threshold = _int(key, value, config.light_day_threshold)
            case "upcoming_days":
                config.upcoming_days = _int(key, value, config.upcoming_days)
            case "events_file":
                config.events_file = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                # JSON list or comma-separated
                if value.startswith("["):
                    try:
                        config.telegram_allowed_users = [int(u) for u in json.loads(value)]
                    except (json.JSONDecodeError, ValueError, TypeError) as e:
                        logger.warning(f"Failed to parse TELEGRAM_ALLOWED_USERS JSON: {e}")
                else:
                    config.telegram_allowed_users = [int(u.strip()) for u in value.split(",") if u.strip()]
            case "location_lookup_url":
                config.location_lookup_url = value
            case "location_latitude":
                config.location_latitude = _float(key, value)
            case "location_longitude":
                config.location_longitude = _float(key, value)

    return config
