"""Location providers."""

import logging

import requests

from agenda.core.events import Coordinate

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_URL = "https://ipapi.co/json/"


class IPLocationProvider:
    """
    Approximate position from an IP geolocation service.

    Implements LocationProvider protocol. Any network or parse failure
    yields None rather than an error.
    """

    def __init__(
        self,
        url: str = DEFAULT_LOOKUP_URL,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()

    def current_coordinate(self) -> Coordinate | None:
        try:
            resp = self._session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
            return Coordinate(float(data["latitude"]), float(data["longitude"]))
        except requests.RequestException as e:
            logger.warning(f"Location lookup failed: {e}")
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Unexpected location response from {self.url}: {e}")
        return None


class FixedLocationProvider:
    """Always answers with a configured coordinate (or None)."""

    def __init__(self, coordinate: Coordinate | None):
        self.coordinate = coordinate

    def current_coordinate(self) -> Coordinate | None:
        return self.coordinate
