"""Functional core - pure scheduling logic with no I/O."""

from .events import (
    Alert,
    AlertTiming,
    Attendee,
    AttendeeResponse,
    CalendarColor,
    Coordinate,
    Event,
    EventLocation,
    EventPriority,
    RecurrenceRule,
    Suggestion,
    SuggestionType,
    TimeSlotRecommendation,
)
from .errors import AgendaError, NotFoundError, SchedulingError, ValidationError
from .conflicts import find_conflicts, recompute
from .availability import find_free_slots, find_slot
from .filters import EventFilter, SearchScope
from .settings import Settings

__all__ = [
    # Model
    "Alert",
    "AlertTiming",
    "Attendee",
    "AttendeeResponse",
    "CalendarColor",
    "Coordinate",
    "Event",
    "EventLocation",
    "EventPriority",
    "RecurrenceRule",
    "Suggestion",
    "SuggestionType",
    "TimeSlotRecommendation",
    # Errors
    "AgendaError",
    "NotFoundError",
    "SchedulingError",
    "ValidationError",
    # Algorithms
    "find_conflicts",
    "recompute",
    "find_free_slots",
    "find_slot",
    "EventFilter",
    "SearchScope",
    "Settings",
]
