"""Calendar event data model - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum

DEFAULT_LENGTH = timedelta(hours=1)
ALL_DAY_LENGTH = timedelta(days=1)


def new_id() -> str:
    """Fresh opaque identifier for events and alerts."""
    return uuid.uuid4().hex


class EventPriority(Enum):
    """Event priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RecurrenceRule(Enum):
    """Recurrence label. Stored only; never expanded into occurrences."""

    NEVER = "never"
    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class CalendarColor(Enum):
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    PINK = "pink"
    BROWN = "brown"
    GRAY = "gray"


class AttendeeResponse(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"


class AlertTiming(Enum):
    """Named reminder offsets relative to the event start."""

    AT_TIME = "At time of event"
    FIVE_MIN = "5 minutes before"
    FIFTEEN_MIN = "15 minutes before"
    THIRTY_MIN = "30 minutes before"
    ONE_HOUR = "1 hour before"
    TWO_HOURS = "2 hours before"
    ONE_DAY = "1 day before"
    TWO_DAYS = "2 days before"
    ONE_WEEK = "1 week before"
    CUSTOM = "Custom"

    @property
    def offset(self) -> timedelta:
        """Signed offset applied to the event start (zero or negative)."""
        return _TIMING_OFFSETS[self]


_TIMING_OFFSETS = {
    AlertTiming.AT_TIME: timedelta(0),
    AlertTiming.FIVE_MIN: timedelta(minutes=-5),
    AlertTiming.FIFTEEN_MIN: timedelta(minutes=-15),
    AlertTiming.THIRTY_MIN: timedelta(minutes=-30),
    AlertTiming.ONE_HOUR: timedelta(hours=-1),
    AlertTiming.TWO_HOURS: timedelta(hours=-2),
    AlertTiming.ONE_DAY: timedelta(days=-1),
    AlertTiming.TWO_DAYS: timedelta(days=-2),
    AlertTiming.ONE_WEEK: timedelta(weeks=-1),
    AlertTiming.CUSTOM: timedelta(0),
}


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'}"


@dataclass
class Alert:
    """A reminder attached to an event."""

    timing: AlertTiming = AlertTiming.FIFTEEN_MIN
    custom_offset: timedelta | None = None
    message: str | None = None
    id: str = field(default_factory=new_id)

    @property
    def offset(self) -> timedelta:
        """Effective offset; a custom offset overrides the named timing."""
        if self.custom_offset is not None:
            return self.custom_offset
        return self.timing.offset

    def trigger_time(self, start: datetime) -> datetime:
        return start + self.offset

    def display_text(self) -> str:
        if self.custom_offset is None:
            return self.timing.value
        minutes = abs(self.custom_offset.total_seconds()) / 60
        hours = minutes / 60
        days = hours / 24
        if days >= 1:
            return f"{_plural(int(days), 'day')} before"
        if hours >= 1:
            return f"{_plural(int(hours), 'hour')} before"
        return f"{_plural(int(minutes), 'minute')} before"

    def to_dict(self) -> dict:
        data = {"id": self.id, "timing": self.timing.name.lower()}
        if self.custom_offset is not None:
            data["offset_seconds"] = int(self.custom_offset.total_seconds())
        if self.message:
            data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Alert":
        offset = data.get("offset_seconds")
        alert = cls(
            timing=AlertTiming[data.get("timing", "fifteen_min").upper()],
            custom_offset=timedelta(seconds=offset) if offset is not None else None,
            message=data.get("message"),
        )
        if data.get("id"):
            alert.id = data["id"]
        return alert


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass
class EventLocation:
    """Where an event takes place."""

    name: str
    address: str | None = None
    coordinate: Coordinate | None = None
    is_current_location: bool = False

    def display_text(self) -> str:
        if self.is_current_location:
            return "Current Location"
        if self.address:
            return f"{self.name}, {self.address}"
        return self.name

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "latitude": self.coordinate.latitude if self.coordinate else None,
            "longitude": self.coordinate.longitude if self.coordinate else None,
            "is_current_location": self.is_current_location,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EventLocation":
        coordinate = None
        if data.get("latitude") is not None and data.get("longitude") is not None:
            coordinate = Coordinate(float(data["latitude"]), float(data["longitude"]))
        return cls(
            name=data.get("name", ""),
            address=data.get("address"),
            coordinate=coordinate,
            is_current_location=bool(data.get("is_current_location", False)),
        )


@dataclass
class Attendee:
    name: str
    email: str | None = None
    phone: str | None = None
    response: AttendeeResponse = AttendeeResponse.PENDING
    is_organizer: bool = False

    def display_name(self) -> str:
        if self.is_organizer:
            return f"{self.name} (Organizer)"
        return self.name


@dataclass
class Event:
    """A calendar event.

    ``id`` is assigned by the store on create and never changes afterwards.
    ``conflicted`` is derived state; the store recomputes it after every
    mutation and ignores whatever value a caller passes in.
    """

    title: str
    start: datetime | None = None
    end: datetime | None = None
    all_day: bool = False
    notes: str = ""
    location: EventLocation | None = None
    url: str | None = None
    priority: EventPriority = EventPriority.MEDIUM
    recurrence: RecurrenceRule = RecurrenceRule.NEVER
    alerts: list[Alert] = field(default_factory=list)
    color: CalendarColor = CalendarColor.BLUE
    time_zone: str | None = None  # IANA name; None means local time
    attendees: list[Attendee] = field(default_factory=list)
    travel_time: timedelta | None = None
    id: str = ""
    conflicted: bool = False
    created_at: datetime | None = None
    modified_at: datetime | None = None

    def __post_init__(self):
        if self.start is not None and self.end is None:
            self.end = self.start + self._default_length()

    def _default_length(self) -> timedelta:
        return ALL_DAY_LENGTH if self.all_day else DEFAULT_LENGTH

    def normalize(self) -> bool:
        """Push ``end`` forward when the range is empty or inverted.

        Returns True if the event was corrected.
        """
        if self.start is None:
            return False
        if self.end is None or self.end <= self.start:
            self.end = self.start + self._default_length()
            return True
        return False

    def move_start(self, start: datetime) -> None:
        """Change the start time, correcting ``end`` if it no longer follows it."""
        self.start = start
        self.normalize()

    def set_all_day(self, all_day: bool) -> None:
        """Toggle all-day; turning it on snaps both ends to midnight."""
        self.all_day = all_day
        if all_day and self.start is not None:
            self.start = datetime.combine(self.start.date(), time.min, tzinfo=self.start.tzinfo)
            if self.end is not None:
                self.end = datetime.combine(self.end.date(), time.min, tzinfo=self.end.tzinfo)
            self.normalize()

    def duration(self) -> timedelta:
        if self.start is None or self.end is None:
            return timedelta(0)
        return self.end - self.start

    def duration_minutes(self) -> int:
        return int(self.duration().total_seconds() / 60)

    def starts_on(self, day: date) -> bool:
        return self.start is not None and self.start.date() == day

    def is_upcoming(self, now: datetime) -> bool:
        return self.start is not None and self.start > now

    def is_happening(self, now: datetime) -> bool:
        if self.start is None or self.end is None:
            return False
        return self.start <= now <= self.end

    def status_text(self, now: datetime) -> str:
        if self.is_happening(now):
            return "Happening now"
        if self.is_upcoming(now):
            return "Upcoming"
        return "Past"

    def format_time(self) -> str:
        """Format the start time for display."""
        if self.all_day:
            return "All day"
        return self.start.strftime("%H:%M")

    def time_range_text(self) -> str:
        if self.all_day:
            return self.start.strftime("%b %d, %Y")
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"

    def conflicts_with(self, other: "Event") -> bool:
        """Strict overlap between two timed events. Touching ends don't count."""
        if self.all_day or other.all_day:
            return False
        return self.start < other.end and self.end > other.start

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "all_day": self.all_day,
            "notes": self.notes,
            "location": self.location.to_dict() if self.location else None,
            "url": self.url,
            "priority": self.priority.value,
            "recurrence": self.recurrence.value,
            "color": self.color.value,
            "time_zone": self.time_zone,
            "alerts": [a.to_dict() for a in self.alerts],
            "conflicted": self.conflicted,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        """Create an Event from a JSON-style mapping.

        Raises ValueError on malformed timestamps or unknown enum values.
        """
        start = datetime.fromisoformat(data["start"]) if data.get("start") else None
        end = datetime.fromisoformat(data["end"]) if data.get("end") else None

        location = None
        loc = data.get("location")
        if isinstance(loc, str):
            location = EventLocation(name=loc)
        elif isinstance(loc, dict):
            location = EventLocation.from_dict(loc)

        return cls(
            title=data.get("title", "Untitled"),
            start=start,
            end=end,
            all_day=bool(data.get("all_day", False)),
            notes=data.get("notes", ""),
            location=location,
            url=data.get("url"),
            priority=EventPriority(data.get("priority", "medium")),
            recurrence=RecurrenceRule(data.get("recurrence", "never")),
            alerts=[Alert.from_dict(a) for a in data.get("alerts", [])],
            color=CalendarColor(data.get("color", "blue")),
            time_zone=data.get("time_zone"),
            id=data.get("id", ""),
        )


@dataclass
class TimeSlotRecommendation:
    """A candidate interval produced by the availability search."""

    start: datetime
    end: datetime
    confidence: float
    reason: str
    conflicting_events: list[Event] = field(default_factory=list)

    def duration(self) -> timedelta:
        return self.end - self.start

    def is_optimal(self) -> bool:
        return self.confidence > 0.8 and not self.conflicting_events

    def format(self) -> str:
        minutes = int(self.duration().total_seconds() / 60)
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')} ({minutes} min)"


class SuggestionType(Enum):
    FIND_TIME = "find-time"
    SMART_SCHEDULE = "smart-schedule"
    EVENT_SUMMARY = "event-summary"
    TRAVEL_TIME = "travel-time"
    CONFLICT_RESOLUTION = "conflict-resolution"


@dataclass
class Suggestion:
    """An advisory item shown alongside the calendar."""

    type: SuggestionType
    title: str
    description: str
    confidence: float
    action_data: dict[str, str] = field(default_factory=dict)
    related_events: list[Event] = field(default_factory=list)

    def confidence_text(self) -> str:
        if self.confidence >= 0.8:
            return "High confidence"
        if self.confidence >= 0.6:
            return "Medium confidence"
        if self.confidence >= 0.4:
            return "Low confidence"
        return "Very low confidence"
