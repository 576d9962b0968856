from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Direction(str, Enum):
    """One-tile movement directions accepted by the move command."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"


class LatLng(BaseModel):
    """A continuous map coordinate in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Token(BaseModel):
    """An immutable collectible with a key encoding its cell of origin."""

    model_config = ConfigDict(frozen=True)

    key: str

    @classmethod
    def minted(cls, i: int, j: int, ordinal: int) -> Token:
        return cls(key=f"i:{i}j:{j}${ordinal}")


@dataclass(slots=True)
class TransferResult:
    """Outcome of a collect or deposit between the player and a cache."""

    cache_key: str
    moved: bool
    token: Token | None = None
    reason: str | None = None
