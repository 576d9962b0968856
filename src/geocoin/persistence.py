"""Session snapshot serialization to a durable key-value store."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from geocoin.adapters.storage import KeyValueStore
from geocoin.exceptions import SessionLoadError
from geocoin.models import LatLng, Token

DEFAULT_STATE_KEY = "state"


class SessionSnapshot(BaseModel):
    """Everything needed to resume a session.

    The active cache set is deliberately absent: it is rebuilt by reconciling
    the archive against ``player_position`` after loading.
    """

    model_config = ConfigDict(populate_by_name=True)

    player_tokens: list[Token] = Field(default_factory=list, alias="playerTokens")
    player_position: LatLng = Field(alias="playerPosition")
    movement_history: list[LatLng] = Field(default_factory=list, alias="movementHistory")
    archived_caches: list[tuple[str, str]] = Field(default_factory=list, alias="archivedCaches")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class SessionGateway:
    """Reads and writes one ``SessionSnapshot`` under a single store key."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = DEFAULT_STATE_KEY,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._key = key
        self._logger = logger or logging.getLogger("geocoin.persistence")

    @property
    def key(self) -> str:
        return self._key

    def save(self, snapshot: SessionSnapshot) -> None:
        self._store.set(self._key, snapshot.to_json())
        self._logger.info(
            "session_saved",
            extra={
                "state_key": self._key,
                "player_tokens": len(snapshot.player_tokens),
                "archived_caches": len(snapshot.archived_caches),
            },
        )

    def load(self) -> SessionSnapshot | None:
        """Return the stored snapshot, or ``None`` when nothing was saved."""
        raw = self._store.get(self._key)
        if raw is None:
            self._logger.info("session_absent", extra={"state_key": self._key})
            return None
        try:
            snapshot = SessionSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise SessionLoadError(f"Stored session under {self._key!r} is invalid: {exc}") from exc
        self._logger.info("session_loaded", extra={"state_key": self._key})
        return snapshot

    def clear(self) -> None:
        self._store.remove(self._key)
        self._logger.info("session_cleared", extra={"state_key": self._key})
