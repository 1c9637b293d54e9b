"""Reminder scheduling - turns event alerts into trigger-service registrations."""

import logging
import threading
from concurrent.futures import Executor, Future
from datetime import datetime
from typing import Callable

from .core.errors import SchedulingError
from .core.events import Alert, Event
from .ports.trigger_service import ReminderPayload, TriggerService

logger = logging.getLogger(__name__)


def trigger_key(event_id: str, alert_id: str) -> str:
    """Composite key identifying one alert of one event."""
    return f"{event_id}:{alert_id}"


def build_payload(event: Event, alert: Alert) -> ReminderPayload:
    """Payload delivered when the alert fires."""
    time_range = event.time_range_text()
    if alert.message:
        subtitle = alert.message
    elif event.location is not None:
        subtitle = event.location.display_text()
    else:
        subtitle = time_range
    return ReminderPayload(
        event_id=event.id,
        alert_id=alert.id,
        title=event.title,
        subtitle=subtitle,
        body=time_range,
    )


class ReminderScheduler:
    """
    Keeps the trigger service in step with each event's alert list.

    Every reschedule cancels the full key set recorded at the previous
    schedule (plus the event's current keys) before registering anything,
    so removed alerts never outlive their configuration. Failures from the
    trigger service are logged and never propagate to the caller.

    When an ``executor`` is given, each cancel-then-register batch is handed
    to it as a single task and the caller does not wait for it. Use a
    single-worker executor to keep batches in submission order.
    """

    def __init__(
        self,
        service: TriggerService,
        clock: Callable[[], datetime] = datetime.now,
        executor: Executor | None = None,
    ):
        self.service = service
        self.clock = clock
        self.executor = executor
        self._registered: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def registered_keys(self, event_id: str) -> list[str]:
        """Keys the trigger service accepted for an event at its last schedule."""
        with self._lock:
            return list(self._registered.get(event_id, []))

    def _keys_to_cancel(self, event: Event) -> list[str]:
        keys = list(self._registered.pop(event.id, []))
        for alert in event.alerts:
            key = trigger_key(event.id, alert.id)
            if key not in keys:
                keys.append(key)
        return keys

    def reschedule(self, event: Event) -> None:
        """Replace every registration for ``event`` with its current alerts."""
        now = self.clock()
        pending: list[tuple[str, datetime, ReminderPayload]] = []

        for alert in event.alerts:
            trigger_at = alert.trigger_time(event.start)
            if trigger_at <= now:
                logger.debug(f"Skipping past reminder for {event.title!r} ({alert.display_text()})")
                continue
            pending.append((trigger_key(event.id, alert.id), trigger_at, build_payload(event, alert)))

        recorded: list[str] = []
        with self._lock:
            stale = self._keys_to_cancel(event)
            self._registered[event.id] = recorded

        self._dispatch(event.id, stale, pending, recorded)

    def cancel(self, event: Event) -> None:
        """Cancel every reminder of ``event`` unconditionally."""
        with self._lock:
            stale = self._keys_to_cancel(event)
        self._dispatch(event.id, stale, [], [])

    def _dispatch(self, event_id: str, stale: list[str], pending: list, recorded: list[str]) -> None:
        if self.executor is None:
            self._apply(event_id, stale, pending, recorded)
            return
        future = self.executor.submit(self._apply, event_id, stale, pending, recorded)
        future.add_done_callback(_log_failure)

    def _apply(self, event_id: str, stale: list[str], pending: list, recorded: list[str]) -> None:
        # Cancellation first: a superseded trigger must not outlive its event
        for key in stale:
            try:
                self.service.cancel([key])
            except Exception as e:
                logger.warning(f"Failed to cancel reminder {key}: {e}")

        for key, trigger_at, payload in pending:
            try:
                self.service.schedule(key, trigger_at, payload)
                with self._lock:
                    # Only the batch that still owns the entry records into it
                    if self._registered.get(event_id) is recorded:
                        recorded.append(key)
                logger.info(f"Scheduled reminder {key} for {payload.title!r} at {trigger_at.isoformat()}")
            except SchedulingError as e:
                logger.warning(f"Failed to schedule reminder {key}: {e}")
            except Exception as e:
                logger.error(f"Trigger service error for reminder {key}: {e}")


def _log_failure(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error(f"Reminder batch failed: {exc}")
