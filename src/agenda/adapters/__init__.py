"""Adapters - I/O implementations of ports."""

from .apscheduler_triggers import APSchedulerTriggerService
from .memory_triggers import InMemoryTriggerService
from .notifiers import LogNotifier, TelegramNotifier
from .location import FixedLocationProvider, IPLocationProvider

__all__ = [
    "APSchedulerTriggerService",
    "InMemoryTriggerService",
    "LogNotifier",
    "TelegramNotifier",
    "FixedLocationProvider",
    "IPLocationProvider",
]
