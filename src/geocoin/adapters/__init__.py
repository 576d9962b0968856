"""Storage and sensor adapters at the edge of the world engine."""

from .geolocation import FixedGeolocationProvider, GeolocationProvider, UnavailableGeolocationProvider
from .storage import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

__all__ = [
    "FixedGeolocationProvider",
    "GeolocationProvider",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "UnavailableGeolocationProvider",
]
