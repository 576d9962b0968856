"""Per-cell token caches and their memento snapshots."""

from __future__ import annotations

import math

from pydantic import BaseModel, ValidationError

from geocoin.exceptions import EmptyCacheError, MementoError
from geocoin.grid import Cell, Grid
from geocoin.luck import Generator, luck, seed_of
from geocoin.models import Token

INITIAL_VALUE_SALT = "initialValue"
MAX_INITIAL_TOKENS = 100


class CellPayload(BaseModel):
    i: int
    j: int


class CacheMemento(BaseModel):
    """Wire shape of a memento: ``{"location": {"i", "j"}, "tokens": [{"key"}]}``."""

    location: CellPayload
    tokens: list[Token]


def initial_token_count(cell: Cell, generator: Generator = luck) -> int:
    return math.floor(generator(seed_of(cell.i, cell.j, INITIAL_VALUE_SALT)) * MAX_INITIAL_TOKENS)


class Cache:
    """A stack of tokens anchored to one grid cell.

    The last token deposited is the first one collected.
    """

    def __init__(self, location: Cell, *, grid: Grid, generator: Generator = luck) -> None:
        self._grid = grid
        self.location = location
        count = initial_token_count(location, generator)
        self.tokens: list[Token] = [Token.minted(location.i, location.j, ordinal) for ordinal in range(count)]

    def __len__(self) -> int:
        return len(self.tokens)

    def __repr__(self) -> str:
        return f"Cache(key={self.key!r}, tokens={len(self.tokens)})"

    @property
    def key(self) -> str:
        return self.location.key

    def collect(self) -> Token:
        if not self.tokens:
            raise EmptyCacheError(self.key)
        return self.tokens.pop()

    def deposit(self, token: Token) -> None:
        self.tokens.append(token)

    def preview(self, limit: int = 5) -> list[Token]:
        """The ``limit`` newest tokens, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.tokens[-limit:]))

    def to_memento(self) -> str:
        payload = CacheMemento(
            location=CellPayload(i=self.location.i, j=self.location.j),
            tokens=list(self.tokens),
        )
        return payload.model_dump_json()

    def restore_from_memento(self, memento: str | bytes) -> None:
        """Replace location and tokens with the memento's contents.

        Raises ``MementoError`` without touching the cache if the memento is
        malformed.
        """
        payload = parse_memento(memento)
        location = self._grid.canonicalize(payload.location.i, payload.location.j)
        self.location = location
        self.tokens = list(payload.tokens)


def parse_memento(memento: str | bytes) -> CacheMemento:
    if not isinstance(memento, (str, bytes)):
        raise MementoError(f"Memento must be JSON text, got {type(memento).__name__}")
    try:
        return CacheMemento.model_validate_json(memento)
    except ValidationError as exc:
        raise MementoError(f"Invalid cache memento: {exc}") from exc
