"""Engine tuning knobs."""

from dataclasses import dataclass
from datetime import time, timedelta


@dataclass(frozen=True)
class Settings:
    """Working hours and heuristics used by the availability search and suggestions."""

    work_start: time = time(9, 0)
    work_end: time = time(17, 0)
    slot_step: timedelta = timedelta(minutes=30)
    suggestion_duration: timedelta = timedelta(hours=2)
    light_day_threshold: int = 3
    upcoming_days: int = 7
