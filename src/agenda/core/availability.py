"""Free-time search over a single working day - no I/O dependencies."""

from datetime import date, datetime, time, timedelta

from .events import Event, TimeSlotRecommendation

DEFAULT_WORK_START = time(9, 0)
DEFAULT_WORK_END = time(17, 0)
DEFAULT_STEP = timedelta(minutes=30)
FIRST_FIT_CONFIDENCE = 0.9


def filter_events_by_date(
    events: list[Event],
    start_date: date,
    end_date: date | None = None,
) -> list[Event]:
    """
    Filter events to those starting within a date range.

    Pure function - no I/O.
    """
    end_date = end_date or start_date
    return [e for e in events if e.start is not None and start_date <= e.start.date() <= end_date]


def sort_events_by_start(events: list[Event]) -> list[Event]:
    """Sort events by start time. Stable, so ties keep their input order."""
    return sorted(events, key=lambda e: e.start)


def _busy(events: list[Event], start: datetime, end: datetime) -> list[Event]:
    return [
        e
        for e in events
        if not e.all_day and e.start is not None and e.end is not None and e.start < end and e.end > start
    ]


def find_slot(
    events: list[Event],
    duration: timedelta,
    reference_date: date,
    work_start: time = DEFAULT_WORK_START,
    work_end: time = DEFAULT_WORK_END,
    step: timedelta = DEFAULT_STEP,
    tzinfo=None,
) -> TimeSlotRecommendation | None:
    """
    Find the earliest free interval of ``duration`` inside working hours.

    First-fit: candidates start at ``work_start`` and advance by ``step``
    until one overlaps no timed event or the candidate would end after
    ``work_end``. Only ``reference_date`` is searched.

    Returns None when no candidate fits.
    """
    if duration <= timedelta(0) or step <= timedelta(0):
        raise ValueError("duration and step must be positive")

    cursor = datetime.combine(reference_date, work_start, tzinfo=tzinfo)
    day_end = datetime.combine(reference_date, work_end, tzinfo=tzinfo)

    while cursor + duration <= day_end:
        slot_end = cursor + duration
        if not _busy(events, cursor, slot_end):
            return TimeSlotRecommendation(
                start=cursor,
                end=slot_end,
                confidence=FIRST_FIT_CONFIDENCE,
                reason="No conflicts during business hours",
                conflicting_events=[],
            )
        cursor += step

    return None


def find_free_slots(
    events: list[Event],
    work_start: time = DEFAULT_WORK_START,
    work_end: time = DEFAULT_WORK_END,
    min_duration: int = 30,
    target_date: date | None = None,
) -> list[TimeSlotRecommendation]:
    """
    Find every free gap between events during work hours.

    Args:
        events: Calendar events (events on other days are ignored)
        work_start: Start of the work day
        work_end: End of the work day
        min_duration: Minimum gap length in minutes
        target_date: Date to inspect (defaults to the first event's date)

    Returns:
        Free gaps in chronological order
    """
    if target_date:
        d = target_date
    elif events and events[0].start is not None:
        d = events[0].start.date()
    else:
        raise ValueError("target_date is required when there are no events")

    timed_events = sort_events_by_start(
        [e for e in events if not e.all_day and e.start is not None and e.end is not None]
    )

    tz = timed_events[0].start.tzinfo if timed_events else None
    day_start = datetime.combine(d, work_start, tzinfo=tz)
    day_end = datetime.combine(d, work_end, tzinfo=tz)

    free_slots = []
    current_time = day_start

    def _gap(start: datetime, end: datetime) -> None:
        if end - start >= timedelta(minutes=min_duration):
            free_slots.append(
                TimeSlotRecommendation(
                    start=start,
                    end=end,
                    confidence=FIRST_FIT_CONFIDENCE,
                    reason="Gap between events",
                )
            )

    for event in timed_events:
        # Skip events outside work hours
        if event.end <= day_start or event.start >= day_end:
            continue

        event_start = max(event.start, day_start)
        event_end = min(event.end, day_end)

        if event_start > current_time:
            _gap(current_time, event_start)

        current_time = max(current_time, event_end)

    if current_time < day_end:
        _gap(current_time, day_end)

    return free_slots
