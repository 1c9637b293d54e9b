"""Event store - the single owner of calendar events.

Every mutation runs the full derivation pipeline before returning:
conflict recompute, reminder reschedule (or cancel on delete), suggestion
regeneration. Subscribers are told about the change afterwards.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Callable, Iterator

from .core import conflicts, suggestions
from .core.availability import find_slot, sort_events_by_start
from .core.errors import NotFoundError, ValidationError
from .core.events import Event, EventLocation, Suggestion, TimeSlotRecommendation, new_id
from .core.filters import EventFilter, apply_filter
from .core.settings import Settings
from .ports.location_provider import LocationProvider
from .reminders import ReminderScheduler

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many concurrent readers or a single writer. Waiting writers go first."""

    def __init__(self):
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ChangeKind(Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class StoreChange:
    kind: ChangeKind
    event_id: str


Listener = Callable[[StoreChange], None]


class EventStore:
    """
    In-memory event store.

    Callers only ever see copies of the stored events; changes go back in
    through ``update``. Mutations and their recompute hold the write lock,
    queries hold the read lock, so no reader observes a stale
    ``conflicted`` flag.
    """

    def __init__(
        self,
        reminders: ReminderScheduler,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.reminders = reminders
        self.settings = settings or Settings()
        self.clock = clock
        self._events: dict[str, Event] = {}
        self._conflicted: set[str] = set()
        self._listeners: list[Listener] = []
        self._lock = ReadWriteLock()
        self._suggestions: list[Suggestion] = suggestions.generate([], set(), self.clock(), self.settings)

    # ---- change channel ----

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, change: StoreChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                logger.error(f"Store listener failed on {change.kind.value} {change.event_id}: {e}")

    # ---- mutations ----

    def _run_pipeline(self, record: Event, deleted: bool = False) -> None:
        """Recompute derived state after a mutation. Caller holds the write lock."""
        events = list(self._events.values())
        self._conflicted = conflicts.recompute(events)
        if deleted:
            self.reminders.cancel(record)
        else:
            self.reminders.reschedule(record)
        self._suggestions = suggestions.generate(events, self._conflicted, self.clock(), self.settings)

    def _prepare(self, event: Event) -> Event:
        """Validated copy of ``event`` with times in the clock's zone."""
        if event.start is None:
            raise ValidationError("Event start time is required")
        record = copy.deepcopy(event)
        tz = self.clock().tzinfo
        record.start = _in_zone(record.start, tz)
        if record.end is not None:
            record.end = _in_zone(record.end, tz)
        if record.normalize():
            logger.debug(f"Corrected empty time range for {record.title!r}")
        return record

    def _commit(self, record: Event, previous: Event | None) -> None:
        """Store ``record`` and recompute, restoring ``previous`` if that fails.

        Caller holds the write lock.
        """
        suggestions_before = self._suggestions
        self._events[record.id] = record
        try:
            self._run_pipeline(record)
        except Exception:
            if previous is None:
                del self._events[record.id]
                self.reminders.cancel(record)
            else:
                self._events[record.id] = previous
                self.reminders.reschedule(previous)
            self._conflicted = conflicts.recompute(list(self._events.values()))
            self._suggestions = suggestions_before
            raise

    def create(self, event: Event) -> str:
        """Add a new event and return its freshly assigned id."""
        record = self._prepare(event)
        record.id = new_id()
        now = self.clock()
        record.created_at = now
        record.modified_at = now
        record.conflicted = False

        with self._lock.write():
            self._commit(record, None)

        logger.info(f"Created event {record.id} ({record.title!r})")
        self._notify(StoreChange(ChangeKind.CREATED, record.id))
        return record.id

    def update(self, event: Event) -> None:
        """Replace the stored event that has the same id."""
        with self._lock.write():
            existing = self._events.get(event.id)
            if existing is None:
                raise NotFoundError(event.id)
            record = self._prepare(event)
            record.created_at = existing.created_at
            record.modified_at = self.clock()
            self._commit(record, existing)

        logger.info(f"Updated event {record.id} ({record.title!r})")
        self._notify(StoreChange(ChangeKind.UPDATED, record.id))

    def delete(self, event_id: str) -> None:
        """Remove an event and cancel its reminders. Unknown ids are ignored."""
        with self._lock.write():
            record = self._events.pop(event_id, None)
            if record is None:
                logger.debug(f"Delete of unknown event {event_id} ignored")
                return
            self._run_pipeline(record, deleted=True)

        logger.info(f"Deleted event {event_id} ({record.title!r})")
        self._notify(StoreChange(ChangeKind.DELETED, event_id))

    # ---- queries ----

    def get(self, event_id: str) -> Event:
        with self._lock.read():
            record = self._events.get(event_id)
            if record is None:
                raise NotFoundError(event_id)
            return copy.deepcopy(record)

    def all_events(self) -> list[Event]:
        """Every event in insertion order."""
        with self._lock.read():
            return copy.deepcopy(list(self._events.values()))

    def events_on(self, day: date, hour: int | None = None) -> list[Event]:
        """
        Events for a calendar day.

        Without ``hour``: events starting on ``day`` (all-day included), by
        start time with ties in insertion order. With ``hour``: timed events
        whose interval intersects ``[hour:00, hour+1:00)`` on that day.
        """
        if isinstance(day, datetime):
            day = day.date()

        with self._lock.read():
            events = list(self._events.values())
            if hour is None:
                found = sort_events_by_start([e for e in events if e.starts_on(day)])
            else:
                if not 0 <= hour <= 23:
                    raise ValueError(f"hour must be between 0 and 23, got {hour}")
                hour_start = datetime.combine(day, time(hour, 0), tzinfo=self.clock().tzinfo)
                hour_end = hour_start + timedelta(hours=1)
                found = [e for e in events if not e.all_day and e.start < hour_end and e.end > hour_start]
            return copy.deepcopy(found)

    def upcoming(self, within_days: int | None = None) -> list[Event]:
        """Events starting in ``[now, now + within_days)``, by start time."""
        days = self.settings.upcoming_days if within_days is None else within_days
        now = self.clock()
        horizon = now + timedelta(days=days)
        with self._lock.read():
            found = [e for e in self._events.values() if now <= e.start < horizon]
            return copy.deepcopy(sort_events_by_start(found))

    def current(self) -> list[Event]:
        """Events in progress right now (inclusive at both ends)."""
        now = self.clock()
        with self._lock.read():
            return copy.deepcopy([e for e in self._events.values() if e.is_happening(now)])

    def search(self, event_filter: EventFilter, search_text: str = "") -> list[Event]:
        with self._lock.read():
            found = apply_filter(list(self._events.values()), event_filter, search_text)
            return copy.deepcopy(sort_events_by_start(found))

    def find_slot(
        self,
        duration: timedelta,
        reference_date: date | None = None,
    ) -> TimeSlotRecommendation | None:
        """Earliest free slot of ``duration`` within working hours."""
        now = self.clock()
        with self._lock.read():
            slot = find_slot(
                list(self._events.values()),
                duration,
                reference_date or now.date(),
                work_start=self.settings.work_start,
                work_end=self.settings.work_end,
                step=self.settings.slot_step,
                tzinfo=now.tzinfo,
            )
            return copy.deepcopy(slot)

    # ---- presentation accessors ----

    @property
    def todays_events(self) -> list[Event]:
        return self.events_on(self.clock().date())

    @property
    def upcoming_events(self) -> list[Event]:
        return self.upcoming()

    @property
    def current_events(self) -> list[Event]:
        return self.current()

    @property
    def conflicting_events(self) -> list[Event]:
        with self._lock.read():
            found = [e for e in self._events.values() if e.id in self._conflicted]
            return copy.deepcopy(sort_events_by_start(found))

    @property
    def suggestions(self) -> list[Suggestion]:
        with self._lock.read():
            return copy.deepcopy(self._suggestions)

    @property
    def next_event(self) -> Event | None:
        upcoming = self.upcoming()
        return upcoming[0] if upcoming else None

    @property
    def badge_count(self) -> int:
        """Number of today's events that have not started yet."""
        now = self.clock()
        return sum(1 for e in self.todays_events if e.is_upcoming(now))

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._events)


def tag_current_location(event: Event, provider: LocationProvider) -> bool:
    """
    Set ``event.location`` to the device's current position.

    Returns False and leaves the event untouched when the provider has no
    coordinate to offer.
    """
    coordinate = provider.current_coordinate()
    if coordinate is None:
        logger.info("Current location unavailable; event location unchanged")
        return False
    event.location = EventLocation(
        name="Current Location",
        coordinate=coordinate,
        is_current_location=True,
    )
    return True


def _in_zone(value: datetime, tz: tzinfo | None) -> datetime:
    """Express ``value`` in ``tz``; naive values are read as already in it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz) if tz is not None else value
    if tz is None:
        return value.astimezone().replace(tzinfo=None)
    return value.astimezone(tz)
