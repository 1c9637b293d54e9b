"""Ports - interfaces/protocols for external dependencies."""

from .trigger_service import ReminderPayload, TriggerService
from .location_provider import LocationProvider
from .notifier import ReminderNotifier

__all__ = [
    "ReminderPayload",
    "TriggerService",
    "LocationProvider",
    "ReminderNotifier",
]
