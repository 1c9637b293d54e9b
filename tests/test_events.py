"""Tests for the event data model."""

from datetime import date, datetime, time, timedelta

import pytest

from agenda.core.events import (
    Alert,
    AlertTiming,
    Attendee,
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


@pytest.fixture
def today():
    return date(2025, 1, 15)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute))


class TestEventDefaults:
    def test_end_defaults_to_one_hour(self, today):
        event = Event(title="Standup", start=at(today, 9))
        assert event.end == at(today, 10)

    def test_all_day_end_defaults_to_one_day(self, today):
        event = Event(title="Conference", start=at(today, 0), all_day=True)
        assert event.end == at(today, 0) + timedelta(days=1)

    def test_no_start_leaves_end_unset(self):
        event = Event(title="Someday")
        assert event.end is None

    def test_defaults(self, today):
        event = Event(title="Meeting", start=at(today, 9))
        assert event.priority == EventPriority.MEDIUM
        assert event.recurrence == RecurrenceRule.NEVER
        assert event.color == CalendarColor.BLUE
        assert event.alerts == []
        assert event.conflicted is False
        assert event.id == ""


class TestNormalize:
    def test_inverted_range_is_corrected(self, today):
        event = Event(title="Oops", start=at(today, 10), end=at(today, 9))
        assert event.normalize() is True
        assert event.end == at(today, 11)

    def test_empty_range_is_corrected(self, today):
        event = Event(title="Oops", start=at(today, 10), end=at(today, 10))
        event.normalize()
        assert event.end == at(today, 11)

    def test_all_day_correction_adds_a_day(self, today):
        event = Event(title="Trip", start=at(today, 0), end=at(today, 0), all_day=True)
        event.normalize()
        assert event.end == at(today, 0) + timedelta(days=1)

    def test_valid_range_untouched(self, today):
        event = Event(title="Fine", start=at(today, 9), end=at(today, 12))
        assert event.normalize() is False
        assert event.end == at(today, 12)

    def test_move_start_past_end_pushes_end(self, today):
        event = Event(title="Meeting", start=at(today, 9), end=at(today, 10))
        event.move_start(at(today, 14))
        assert event.start == at(today, 14)
        assert event.end == at(today, 15)

    def test_move_start_within_range_keeps_end(self, today):
        event = Event(title="Meeting", start=at(today, 9), end=at(today, 12))
        event.move_start(at(today, 10))
        assert event.end == at(today, 12)

    def test_set_all_day_snaps_to_midnight(self, today):
        event = Event(title="Holiday", start=at(today, 9, 30), end=at(today, 17))
        event.set_all_day(True)
        assert event.start == at(today, 0)
        assert event.end == at(today, 0) + timedelta(days=1)


class TestEventHelpers:
    def test_duration_minutes(self, today):
        event = Event(title="Meeting", start=at(today, 14), end=at(today, 15, 30))
        assert event.duration_minutes() == 90

    def test_format_time(self, today):
        assert Event(title="M", start=at(today, 14, 30)).format_time() == "14:30"
        assert Event(title="H", start=at(today, 0), all_day=True).format_time() == "All day"

    def test_time_range_text(self, today):
        event = Event(title="Meeting", start=at(today, 9), end=at(today, 10, 15))
        assert event.time_range_text() == "09:00 - 10:15"

    def test_status_text(self, today):
        event = Event(title="Meeting", start=at(today, 10), end=at(today, 11))
        assert event.status_text(at(today, 9)) == "Upcoming"
        assert event.status_text(at(today, 10, 30)) == "Happening now"
        assert event.status_text(at(today, 11)) == "Happening now"
        assert event.status_text(at(today, 12)) == "Past"

    def test_conflicts_with_is_strict(self, today):
        a = Event(title="A", start=at(today, 9), end=at(today, 10))
        b = Event(title="B", start=at(today, 10), end=at(today, 11))
        c = Event(title="C", start=at(today, 9, 30), end=at(today, 10, 30))
        assert a.conflicts_with(b) is False
        assert a.conflicts_with(c) is True
        assert c.conflicts_with(a) is True

    def test_all_day_never_conflicts(self, today):
        a = Event(title="A", start=at(today, 0), all_day=True)
        b = Event(title="B", start=at(today, 9), end=at(today, 10))
        assert a.conflicts_with(b) is False
        assert b.conflicts_with(a) is False


class TestAlert:
    def test_named_offsets(self):
        assert AlertTiming.AT_TIME.offset == timedelta(0)
        assert AlertTiming.FIFTEEN_MIN.offset == timedelta(seconds=-900)
        assert AlertTiming.ONE_WEEK.offset == timedelta(seconds=-604800)

    def test_custom_offset_overrides_timing(self):
        alert = Alert(timing=AlertTiming.ONE_HOUR, custom_offset=timedelta(minutes=-10))
        assert alert.offset == timedelta(minutes=-10)

    def test_trigger_time(self, today):
        alert = Alert(timing=AlertTiming.FIFTEEN_MIN)
        assert alert.trigger_time(at(today, 10)) == at(today, 9, 45)

    def test_ids_are_unique(self):
        assert Alert().id != Alert().id

    @pytest.mark.parametrize(
        "offset, text",
        [
            (timedelta(minutes=-1), "1 minute before"),
            (timedelta(minutes=-45), "45 minutes before"),
            (timedelta(hours=-3), "3 hours before"),
            (timedelta(days=-1), "1 day before"),
        ],
    )
    def test_custom_display_text(self, offset, text):
        assert Alert(timing=AlertTiming.CUSTOM, custom_offset=offset).display_text() == text

    def test_named_display_text(self):
        assert Alert(timing=AlertTiming.THIRTY_MIN).display_text() == "30 minutes before"


class TestLocationAndAttendees:
    def test_location_display_text(self):
        assert EventLocation(name="Office").display_text() == "Office"
        assert EventLocation(name="Office", address="1 Main St").display_text() == "Office, 1 Main St"
        here = EventLocation(name="x", coordinate=Coordinate(1.0, 2.0), is_current_location=True)
        assert here.display_text() == "Current Location"

    def test_organizer_display_name(self):
        assert Attendee(name="Sam", is_organizer=True).display_name() == "Sam (Organizer)"
        assert Attendee(name="Sam").display_name() == "Sam"


class TestSerialization:
    def test_from_dict(self):
        event = Event.from_dict(
            {
                "title": "Dentist",
                "start": "2025-01-15T10:00:00",
                "end": "2025-01-15T11:00:00",
                "priority": "high",
                "location": {"name": "Clinic", "latitude": 43.6, "longitude": -79.4},
                "alerts": [{"timing": "one_hour"}, {"timing": "custom", "offset_seconds": -600}],
            }
        )
        assert event.title == "Dentist"
        assert event.start == datetime(2025, 1, 15, 10)
        assert event.priority == EventPriority.HIGH
        assert event.location.coordinate == Coordinate(43.6, -79.4)
        assert event.alerts[0].offset == timedelta(hours=-1)
        assert event.alerts[1].offset == timedelta(minutes=-10)

    def test_from_dict_without_end(self):
        event = Event.from_dict({"title": "Call", "start": "2025-01-15T10:00:00"})
        assert event.end == datetime(2025, 1, 15, 11)

    def test_from_dict_rejects_bad_timestamp(self):
        with pytest.raises(ValueError):
            Event.from_dict({"title": "Bad", "start": "tomorrow-ish"})

    def test_to_dict(self, today):
        event = Event(title="Meeting", start=at(today, 9), alerts=[Alert(timing=AlertTiming.FIVE_MIN)])
        data = event.to_dict()
        assert data["title"] == "Meeting"
        assert data["start"] == "2025-01-15T09:00:00"
        assert data["end"] == "2025-01-15T10:00:00"
        assert data["alerts"][0]["timing"] == "five_min"

    def test_location_survives_round_trip(self, today):
        location = EventLocation(name="Office", address="1 Main St", coordinate=Coordinate(43.6, -79.4))
        event = Event(title="Review", start=at(today, 14), location=location)

        data = event.to_dict()
        assert data["location"]["address"] == "1 Main St"
        assert Event.from_dict(data).location == location


class TestTimeSlotRecommendation:
    def test_is_optimal(self, today):
        slot = TimeSlotRecommendation(start=at(today, 9), end=at(today, 11), confidence=0.9, reason="free")
        assert slot.is_optimal() is True
        assert slot.duration() == timedelta(hours=2)
        assert slot.format() == "09:00-11:00 (120 min)"

    def test_not_optimal_with_conflicts(self, today):
        other = Event(title="Busy", start=at(today, 9))
        slot = TimeSlotRecommendation(
            start=at(today, 9), end=at(today, 11), confidence=0.9, reason="", conflicting_events=[other]
        )
        assert slot.is_optimal() is False


class TestSuggestion:
    @pytest.mark.parametrize(
        "confidence, text",
        [(0.9, "High confidence"), (0.7, "Medium confidence"), (0.5, "Low confidence"), (0.1, "Very low confidence")],
    )
    def test_confidence_text(self, confidence, text):
        s = Suggestion(type=SuggestionType.FIND_TIME, title="", description="", confidence=confidence)
        assert s.confidence_text() == text
