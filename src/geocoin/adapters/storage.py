"""Durable key-value stores for persisted sessions."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from geocoin.exceptions import SessionLoadError

logger = logging.getLogger("geocoin.storage")


class KeyValueStore(Protocol):
    """String-keyed, string-valued durable storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value or ``None`` if the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""


class InMemoryKeyValueStore:
    """Dictionary-backed store for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileKeyValueStore:
    """All keys kept in a single JSON object on disk."""

    def __init__(self, file_path: str | Path) -> None:
        self._path = Path(file_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self._write(values)

    def remove(self, key: str) -> None:
        try:
            values = self._read()
        except SessionLoadError as exc:
            # Unreadable file: nothing in it can be recovered, start over.
            logger.warning("state_file_discarded", extra={"path": str(self._path), "reason": str(exc)})
            self._write({})
            return
        if values.pop(key, None) is not None:
            self._write(values)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            values = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SessionLoadError(f"State file {self._path} is not valid JSON: {exc}") from exc
        if not isinstance(values, dict):
            raise SessionLoadError(f"State file {self._path} must hold a JSON object, got {type(values).__name__}")
        return values

    def _write(self, values: dict[str, str]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(values), encoding="utf-8")
        tmp_path.replace(self._path)
