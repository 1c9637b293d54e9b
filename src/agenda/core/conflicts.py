"""Conflict detection - pure functions over event lists."""

import heapq

from .events import Event


def overlaps(a: Event, b: Event) -> bool:
    """Two timed events conflict iff their intervals strictly overlap."""
    return a.conflicts_with(b)


def _timed(events: list[Event]) -> list[Event]:
    return [e for e in events if not e.all_day and e.start is not None and e.end is not None]


def find_conflicts(events: list[Event]) -> list[tuple[Event, Event]]:
    """
    Find overlapping events.

    Returns each conflicting unordered pair once, ordered by start time.
    All-day events never take part in a conflict.
    """
    conflicts = []
    sorted_events = sorted(_timed(events), key=lambda e: e.start)

    for i, e1 in enumerate(sorted_events):
        for e2 in sorted_events[i + 1 :]:
            # Sorted by start: nothing later can overlap e1 either
            if e2.start >= e1.end:
                break
            if overlaps(e1, e2):
                conflicts.append((e1, e2))

    return conflicts


def conflicted_ids(events: list[Event]) -> set[str]:
    """
    Ids of every event that overlaps at least one other event.

    Interval sweep: events are visited in start order while a min-heap holds
    the end times of intervals still active. Only the active intervals can
    overlap the event being visited.
    """
    result: set[str] = set()
    active: list[tuple] = []  # (end, seq, event)

    for seq, event in enumerate(sorted(_timed(events), key=lambda e: e.start)):
        while active and active[0][0] <= event.start:
            heapq.heappop(active)
        hits = [e for _, _, e in active if overlaps(e, event)]
        if hits:
            result.add(event.id)
            result.update(e.id for e in hits)
        heapq.heappush(active, (event.end, seq, event))

    return result


def recompute(events: list[Event]) -> set[str]:
    """
    Full recompute of conflict state.

    Sets every event's ``conflicted`` flag to membership in the conflict set
    and returns that set.
    """
    conflicted = conflicted_ids(events)
    for event in events:
        event.conflicted = event.id in conflicted
    return conflicted
