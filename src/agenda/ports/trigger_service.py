"""Trigger-scheduling service interface."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class ReminderPayload:
    """What a fired reminder carries back to the user."""

    event_id: str
    alert_id: str
    title: str
    subtitle: str
    body: str = ""


class TriggerService(Protocol):
    """Interface for registering one-shot timed notifications."""

    def schedule(self, key: str, trigger_at: datetime, payload: ReminderPayload) -> None:
        """Register a notification under ``key``. Raises SchedulingError on failure."""
        ...

    def cancel(self, keys: list[str]) -> None:
        """Cancel registrations. Keys that are not registered are ignored."""
        ...
