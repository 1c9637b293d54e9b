"""Tests for reminder scheduling."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from unittest.mock import MagicMock, call

import pytest

from agenda.adapters.memory_triggers import InMemoryTriggerService
from agenda.core.errors import SchedulingError
from agenda.core.events import Alert, AlertTiming, Event, EventLocation
from agenda.reminders import ReminderScheduler, build_payload, trigger_key

NOW = datetime(2025, 1, 15, 8, 0)


@pytest.fixture
def service():
    return MagicMock()


@pytest.fixture
def scheduler(service):
    return ReminderScheduler(service, clock=lambda: NOW)


def make_event(start: datetime, alerts: list[Alert], event_id: str = "evt1") -> Event:
    return Event(title="Dentist", start=start, alerts=alerts, id=event_id)


class TestTriggerKey:
    def test_format(self):
        assert trigger_key("evt1", "al1") == "evt1:al1"


class TestReschedule:
    def test_registers_future_alerts(self, scheduler, service):
        alert = Alert(timing=AlertTiming.FIFTEEN_MIN)
        event = make_event(NOW + timedelta(hours=2), [alert])

        scheduler.reschedule(event)

        service.schedule.assert_called_once()
        key, trigger_at, payload = service.schedule.call_args.args
        assert key == f"evt1:{alert.id}"
        assert trigger_at == NOW + timedelta(hours=1, minutes=45)
        assert payload.event_id == "evt1"
        assert payload.alert_id == alert.id
        assert payload.title == "Dentist"

    def test_past_trigger_is_skipped(self, scheduler, service):
        # Starts in 5 minutes with a 15-minute alert: trigger already passed
        alert = Alert(timing=AlertTiming.CUSTOM, custom_offset=timedelta(seconds=-900))
        event = make_event(NOW + timedelta(seconds=300), [alert])

        scheduler.reschedule(event)

        service.schedule.assert_not_called()
        assert scheduler.registered_keys("evt1") == []

    def test_trigger_exactly_now_is_skipped(self, scheduler, service):
        event = make_event(NOW, [Alert(timing=AlertTiming.AT_TIME)])
        scheduler.reschedule(event)
        service.schedule.assert_not_called()

    def test_cancels_before_registering(self, scheduler, service):
        alert = Alert(timing=AlertTiming.FIVE_MIN)
        event = make_event(NOW + timedelta(hours=1), [alert])

        scheduler.reschedule(event)

        names = [c[0] for c in service.mock_calls]
        assert names == ["cancel", "schedule"]

    def test_removed_alert_is_cancelled(self, scheduler, service):
        keep = Alert(timing=AlertTiming.FIVE_MIN)
        drop = Alert(timing=AlertTiming.ONE_HOUR)
        event = make_event(NOW + timedelta(hours=3), [keep, drop])
        scheduler.reschedule(event)
        service.reset_mock()

        event.alerts = [keep]
        scheduler.reschedule(event)

        cancelled = {c.args[0][0] for c in service.cancel.call_args_list}
        assert f"evt1:{drop.id}" in cancelled
        assert scheduler.registered_keys("evt1") == [f"evt1:{keep.id}"]

    def test_reschedule_twice_is_idempotent(self):
        service = InMemoryTriggerService()
        scheduler = ReminderScheduler(service, clock=lambda: NOW)
        event = make_event(NOW + timedelta(days=2), [Alert(timing=AlertTiming.ONE_DAY), Alert()])

        scheduler.reschedule(event)
        first = set(service.registrations)
        scheduler.reschedule(event)

        assert set(service.registrations) == first
        assert len(service.registrations) == 2

    def test_scheduling_error_is_logged_not_raised(self, scheduler, service, caplog):
        service.schedule.side_effect = SchedulingError("service down")
        event = make_event(NOW + timedelta(hours=2), [Alert(), Alert(timing=AlertTiming.ONE_HOUR)])

        with caplog.at_level(logging.WARNING, logger="agenda.reminders"):
            scheduler.reschedule(event)

        assert service.schedule.call_count == 2
        assert "service down" in caplog.text

    def test_failed_registration_is_not_recorded(self, scheduler, service):
        ok = Alert(timing=AlertTiming.ONE_HOUR)
        bad = Alert()

        def reject_bad(key, trigger_at, payload):
            if key.endswith(bad.id):
                raise SchedulingError("rejected")

        service.schedule.side_effect = reject_bad
        scheduler.reschedule(make_event(NOW + timedelta(hours=2), [ok, bad]))

        assert scheduler.registered_keys("evt1") == [f"evt1:{ok.id}"]

    def test_unexpected_service_error_is_logged(self, scheduler, service, caplog):
        service.schedule.side_effect = RuntimeError("boom")
        event = make_event(NOW + timedelta(hours=2), [Alert()])

        with caplog.at_level(logging.ERROR, logger="agenda.reminders"):
            scheduler.reschedule(event)

        assert "boom" in caplog.text

    def test_executor_dispatch(self, service):
        with ThreadPoolExecutor(max_workers=1) as executor:
            scheduler = ReminderScheduler(service, clock=lambda: NOW, executor=executor)
            scheduler.reschedule(make_event(NOW + timedelta(hours=2), [Alert()]))
        service.schedule.assert_called_once()


class TestCancel:
    def test_cancel_issues_one_call_per_alert_key(self, scheduler, service):
        a1, a2 = Alert(), Alert(timing=AlertTiming.ONE_HOUR)
        event = make_event(NOW + timedelta(days=1), [a1, a2])
        scheduler.reschedule(event)
        service.reset_mock()

        scheduler.cancel(event)

        assert service.cancel.call_args_list == [call([f"evt1:{a1.id}"]), call([f"evt1:{a2.id}"])]
        assert scheduler.registered_keys("evt1") == []

    def test_cancel_covers_never_registered_alerts(self, scheduler, service):
        alert = Alert()
        event = make_event(NOW - timedelta(hours=1), [alert])
        scheduler.reschedule(event)
        service.reset_mock()

        scheduler.cancel(event)

        service.cancel.assert_called_once_with([f"evt1:{alert.id}"])

    def test_cancel_failure_is_logged(self, scheduler, service, caplog):
        service.cancel.side_effect = RuntimeError("gone")
        with caplog.at_level(logging.WARNING, logger="agenda.reminders"):
            scheduler.cancel(make_event(NOW + timedelta(days=1), [Alert()]))
        assert "gone" in caplog.text


class TestBuildPayload:
    def test_message_wins(self):
        alert = Alert(message="Bring insurance card")
        event = make_event(datetime(2025, 1, 16, 10), [alert])
        payload = build_payload(event, alert)
        assert payload.subtitle == "Bring insurance card"
        assert payload.body == "10:00 - 11:00"

    def test_location_then_time_range(self):
        alert = Alert()
        event = make_event(datetime(2025, 1, 16, 10), [alert])
        assert build_payload(event, alert).subtitle == "10:00 - 11:00"
        event.location = EventLocation(name="Clinic")
        assert build_payload(event, alert).subtitle == "Clinic"
