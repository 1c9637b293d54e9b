"""Event filtering and text search - pure functions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .events import CalendarColor, Event, EventPriority, RecurrenceRule


class SearchScope(Enum):
    ALL = "all"
    TITLE = "title"
    LOCATION = "location"
    ATTENDEES = "attendees"
    NOTES = "notes"


@dataclass
class EventFilter:
    """Criteria for narrowing down a list of events."""

    time_range: tuple[datetime, datetime] | None = None
    priorities: set[EventPriority] = field(default_factory=lambda: set(EventPriority))
    colors: set[CalendarColor] = field(default_factory=lambda: set(CalendarColor))
    include_all_day: bool = True
    include_recurring: bool = True
    search_scope: SearchScope = SearchScope.ALL

    def _in_range(self, event: Event) -> bool:
        if self.time_range is None:
            return True
        lo, hi = self.time_range
        return lo <= event.start <= hi or lo <= event.end <= hi

    def _text_matches(self, event: Event, needle: str) -> bool:
        title = needle in event.title.lower()
        notes = needle in event.notes.lower()
        location = event.location is not None and needle in event.location.name.lower()
        attendees = any(needle in a.name.lower() for a in event.attendees)

        match self.search_scope:
            case SearchScope.TITLE:
                return title
            case SearchScope.LOCATION:
                return location
            case SearchScope.ATTENDEES:
                return attendees
            case SearchScope.NOTES:
                return notes
            case _:
                return title or notes or location or attendees

    def matches(self, event: Event, search_text: str = "") -> bool:
        if not self._in_range(event):
            return False
        if event.priority not in self.priorities:
            return False
        if event.color not in self.colors:
            return False
        if not self.include_all_day and event.all_day:
            return False
        if not self.include_recurring and event.recurrence != RecurrenceRule.NEVER:
            return False
        if search_text:
            return self._text_matches(event, search_text.lower())
        return True


def apply_filter(events: list[Event], event_filter: EventFilter, search_text: str = "") -> list[Event]:
    return [e for e in events if event_filter.matches(e, search_text)]
