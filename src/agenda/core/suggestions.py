"""Deterministic scheduling suggestions - pure functions."""

from datetime import date, datetime, timedelta

from .availability import find_slot, sort_events_by_start
from .events import Event, Suggestion, SuggestionType
from .settings import Settings


def events_on_day(events: list[Event], day: date) -> list[Event]:
    """Events starting on ``day`` (all-day included), by start time."""
    return sort_events_by_start([e for e in events if e.starts_on(day)])


def _hours(duration: timedelta) -> str:
    hours = duration.total_seconds() / 3600
    if hours == int(hours):
        return f"{int(hours)}-hour"
    return f"{int(duration.total_seconds() // 60)}-minute"


def free_time_suggestion(events: list[Event], now: datetime, settings: Settings) -> Suggestion | None:
    slot = find_slot(
        events,
        settings.suggestion_duration,
        now.date(),
        work_start=settings.work_start,
        work_end=settings.work_end,
        step=settings.slot_step,
        tzinfo=now.tzinfo,
    )
    if slot is None:
        return None
    return Suggestion(
        type=SuggestionType.FIND_TIME,
        title="Free Time Available",
        description=f"Found a {_hours(settings.suggestion_duration)} free slot at {slot.start.strftime('%H:%M')}",
        confidence=slot.confidence,
        action_data={"start": slot.start.isoformat(), "end": slot.end.isoformat()},
        related_events=list(slot.conflicting_events),
    )


def conflict_suggestion(conflicting: list[Event]) -> Suggestion | None:
    if not conflicting:
        return None
    return Suggestion(
        type=SuggestionType.CONFLICT_RESOLUTION,
        title="Schedule Conflicts Detected",
        description=f"Found {len(conflicting)} conflicting events that need attention",
        confidence=0.9,
        related_events=list(conflicting),
    )


def light_day_suggestion(events: list[Event], now: datetime, settings: Settings) -> Suggestion | None:
    tomorrow = now.date() + timedelta(days=1)
    tomorrow_events = events_on_day(events, tomorrow)
    if len(tomorrow_events) >= settings.light_day_threshold:
        return None
    return Suggestion(
        type=SuggestionType.SMART_SCHEDULE,
        title="Light Schedule Tomorrow",
        description="Tomorrow looks like a good day for important tasks",
        confidence=0.8,
        action_data={"suggested_date": tomorrow.isoformat()},
        related_events=tomorrow_events,
    )


def generate(
    events: list[Event],
    conflicted: set[str],
    now: datetime,
    settings: Settings | None = None,
) -> list[Suggestion]:
    """
    Rebuild the suggestion list from current state.

    Rules run in a fixed order: free time today, conflicts, light day
    tomorrow. Each rule contributes at most one suggestion.
    """
    settings = settings or Settings()
    conflicting = sort_events_by_start([e for e in events if e.id in conflicted])

    candidates = [
        free_time_suggestion(events, now, settings),
        conflict_suggestion(conflicting),
        light_day_suggestion(events, now, settings),
    ]
    return [s for s in candidates if s is not None]
