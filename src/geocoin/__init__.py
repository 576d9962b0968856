"""
geocoin world engine.

A player walks a lat/lng grid; deterministically seeded caches of tokens spawn
around them and tokens move between the player and caches. The engine owns
the state and publishes events; rendering is left to whoever subscribes.
"""

from .cache import Cache
from .grid import Bounds, Cell, Grid
from .inventory import PlayerInventory
from .models import Direction, LatLng, Token, TransferResult
from .persistence import SessionGateway, SessionSnapshot
from .session import GameSession
from .world import WorldStore

__version__ = "0.1.0"

__all__ = [
    "Bounds",
    "Cache",
    "Cell",
    "Direction",
    "GameSession",
    "Grid",
    "LatLng",
    "PlayerInventory",
    "SessionGateway",
    "SessionSnapshot",
    "Token",
    "TransferResult",
    "WorldStore",
]
