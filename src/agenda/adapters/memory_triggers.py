"""In-memory trigger service for dry runs."""

from datetime import datetime

from agenda.ports.trigger_service import ReminderPayload


class InMemoryTriggerService:
    """
    Keeps registrations in a dict keyed by trigger key.

    Implements TriggerService protocol. Nothing ever fires on its own;
    ``due`` lists what would have fired by a given time.
    """

    def __init__(self):
        self.registrations: dict[str, tuple[datetime, ReminderPayload]] = {}

    def schedule(self, key: str, trigger_at: datetime, payload: ReminderPayload) -> None:
        self.registrations[key] = (trigger_at, payload)

    def cancel(self, keys: list[str]) -> None:
        for key in keys:
            self.registrations.pop(key, None)

    def pending_keys(self) -> list[str]:
        return sorted(self.registrations, key=lambda k: self.registrations[k][0])

    def due(self, now: datetime) -> list[ReminderPayload]:
        """Payloads whose trigger time has passed, earliest first."""
        return [self.registrations[k][1] for k in self.pending_keys() if self.registrations[k][0] <= now]
