"""Reminder delivery interface."""

from typing import Protocol

from .trigger_service import ReminderPayload


class ReminderNotifier(Protocol):
    """Interface for delivering a reminder once its trigger fires."""

    def notify(self, payload: ReminderPayload) -> None:
        ...
