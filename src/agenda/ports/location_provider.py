"""Location provider interface."""

from typing import Protocol

from agenda.core.events import Coordinate


class LocationProvider(Protocol):
    """Interface for looking up the device's current position."""

    def current_coordinate(self) -> Coordinate | None:
        """Current coordinate, or None if unavailable or not authorized."""
        ...
