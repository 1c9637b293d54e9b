"""Initial calendar contents - demo data and JSON event files."""

import json
import logging
from datetime import datetime, time, timedelta
from itertools import cycle
from pathlib import Path

from .core.events import Alert, AlertTiming, CalendarColor, Event

logger = logging.getLogger(__name__)

SAMPLE_COLORS = [CalendarColor.BLUE, CalendarColor.GREEN, CalendarColor.ORANGE, CalendarColor.PURPLE]


def sample_events(now: datetime) -> list[Event]:
    """A small demo calendar anchored on ``now``, each event with a 15-minute alert."""
    today = now.date()

    def at(days: int, hour: int, minute: int = 0) -> datetime:
        return datetime.combine(today + timedelta(days=days), time(hour, minute), tzinfo=now.tzinfo)

    events = [
        Event(title="Team Meeting", start=now + timedelta(hours=2), end=now + timedelta(hours=3)),
        Event(title="Lunch with Client", start=at(1, 12), end=at(1, 13, 30)),
        Event(title="Project Review", start=at(2, 14), end=at(2, 16)),
        Event(title="All-Day Conference", start=at(3, 0), all_day=True),
    ]

    for event, color in zip(events, cycle(SAMPLE_COLORS)):
        event.color = color
        event.alerts = [Alert(timing=AlertTiming.FIFTEEN_MIN)]

    return events


def load_events(path: Path | str) -> list[Event]:
    """
    Read events from a JSON file holding a list of event objects.

    Raises ValueError when the file is not a JSON list or an entry is
    malformed; a bad calendar file should not be half-loaded.
    """
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of events")

    events = []
    for i, item in enumerate(data):
        try:
            events.append(Event.from_dict(item))
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise ValueError(f"{path}: event #{i} is invalid: {e}") from e

    logger.info(f"Loaded {len(events)} events from {path}")
    return events
