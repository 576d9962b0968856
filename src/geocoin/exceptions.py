"""Domain exception hierarchy for the geocoin world engine."""


class GeocoinError(Exception):
    """Base class for all geocoin-specific errors."""


class MementoError(GeocoinError):
    """Raised when a cache memento cannot be parsed or validated."""


class EmptyCacheError(GeocoinError):
    """Raised when collecting from a cache that holds no tokens."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Cache {key} has no tokens to collect.")


class UnknownCacheError(GeocoinError, KeyError):
    """Raised when a command names a cache that is not in the active set."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No active cache at {key}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidDirectionError(GeocoinError, ValueError):
    """Raised when a move command receives an unrecognised direction."""


class SessionLoadError(GeocoinError):
    """Raised when a persisted session snapshot is malformed."""


class GeolocationUnavailableError(GeocoinError, RuntimeError):
    """Raised by geolocation providers that cannot report a position."""
