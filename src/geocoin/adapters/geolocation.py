"""Position sensor adapters.

A provider either returns the current position or raises
``GeolocationUnavailableError``; it never mutates game state itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from geocoin.exceptions import GeolocationUnavailableError
from geocoin.models import LatLng


class GeolocationProvider(Protocol):
    def current_position(self) -> LatLng:
        """Return the device position or raise ``GeolocationUnavailableError``."""


@dataclass(slots=True)
class FixedGeolocationProvider:
    """Reports a configured position, e.g. from settings or a test."""

    lat: float
    lng: float

    def current_position(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)


@dataclass(slots=True)
class UnavailableGeolocationProvider:
    """Stands in when no sensor is configured or permission was denied."""

    reason: str = "Geolocation is not supported on this device."

    def current_position(self) -> LatLng:
        raise GeolocationUnavailableError(self.reason)
