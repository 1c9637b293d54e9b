"""Error taxonomy for the scheduling engine."""


class AgendaError(Exception):
    """Base class for engine errors."""

    pass


class ValidationError(AgendaError):
    """Raised when a required field is missing on create."""

    pass


class NotFoundError(AgendaError):
    """Raised when an identifier does not match any stored event."""

    def __init__(self, event_id: str):
        super().__init__(f"No event with id {event_id!r}")
        self.event_id = event_id


class SchedulingError(AgendaError):
    """Raised by trigger services when a reminder cannot be registered."""

    pass
