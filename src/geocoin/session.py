"""Game session orchestration: player state plus the command handlers."""

from __future__ import annotations

import logging

from geocoin.adapters.geolocation import GeolocationProvider
from geocoin.adapters.storage import InMemoryKeyValueStore, KeyValueStore
from geocoin.cache import Cache
from geocoin.config import Settings
from geocoin.exceptions import GeolocationUnavailableError, InvalidDirectionError, MementoError, SessionLoadError
from geocoin.grid import Grid
from geocoin.inventory import PlayerInventory
from geocoin.luck import Generator, luck
from geocoin.models import Direction, LatLng, TransferResult
from geocoin.persistence import SessionGateway, SessionSnapshot
from geocoin.telemetry.events import (
    CACHE_CHANGED,
    DRAMATIC_MOVEMENT,
    INVENTORY_CHANGED,
    PLAYER_MOVED,
    SESSION_RESET,
    EventBus,
)
from geocoin.world import WorldStore

_STEPS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (1, 0),
    Direction.SOUTH: (-1, 0),
    Direction.EAST: (0, 1),
    Direction.WEST: (0, -1),
}


def parse_direction(direction: Direction | str) -> Direction:
    if isinstance(direction, Direction):
        return direction
    try:
        return Direction(str(direction).strip().lower())
    except ValueError:
        raise InvalidDirectionError(f"Invalid direction: {direction!r}") from None


class GameSession:
    """Single-player session owning the inventory, position and world store.

    Every command runs to completion before any event is published, so
    subscribers only ever observe consistent state.
    """

    def __init__(
        self,
        *,
        origin: LatLng,
        tile_width: float,
        neighborhood_size: int,
        spawn_probability: float,
        generator: Generator = luck,
        gateway: SessionGateway | None = None,
        events: EventBus | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.events = events or EventBus()
        self.grid = Grid(tile_width, neighborhood_size)
        self.world = WorldStore(
            self.grid,
            spawn_probability=spawn_probability,
            generator=generator,
            events=self.events,
        )
        self.inventory = PlayerInventory()
        self._gateway = gateway or SessionGateway(InMemoryKeyValueStore())
        self._logger = logger or logging.getLogger("geocoin.session")
        self._origin = origin
        self._position = origin
        self._history: list[LatLng] = [origin]
        self._inventory_touched = False
        self.world.reconcile(origin)

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        *,
        store: KeyValueStore | None = None,
        generator: Generator = luck,
        events: EventBus | None = None,
    ) -> GameSession:
        return cls(
            origin=LatLng(lat=config.origin_lat, lng=config.origin_lng),
            tile_width=config.tile_width,
            neighborhood_size=config.neighborhood_size,
            spawn_probability=config.cache_spawn_probability,
            generator=generator,
            gateway=SessionGateway(store or InMemoryKeyValueStore(), key=config.state_key),
            events=events,
        )

    @property
    def origin(self) -> LatLng:
        return self._origin

    @property
    def position(self) -> LatLng:
        return self._position

    @property
    def movement_history(self) -> list[LatLng]:
        return list(self._history)

    @property
    def active_caches(self) -> dict[str, Cache]:
        return self.world.active

    def move(self, direction: Direction | str) -> LatLng:
        """Step one tile; an unknown direction raises ``InvalidDirectionError``."""
        d_lat, d_lng = _STEPS[parse_direction(direction)]
        width = self.grid.tile_width
        return self.set_position(self._position.lat + d_lat * width, self._position.lng + d_lng * width)

    def set_position(self, lat: float, lng: float, *, dramatic: bool = False) -> LatLng:
        position = LatLng(lat=lat, lng=lng)
        previous = self._position
        self._position = position
        try:
            self.world.reconcile(position)
        except MementoError:
            self._position = previous
            raise
        self._history.append(position)
        self._logger.info("player_moved", extra={"lat": lat, "lng": lng})
        self.events.emit(PLAYER_MOVED, {"lat": lat, "lng": lng})
        if dramatic:
            self.events.emit(DRAMATIC_MOVEMENT, {"lat": lat, "lng": lng})
        return position

    def locate(self, provider: GeolocationProvider) -> bool:
        """Jump to the sensor-reported position; ``False`` if the sensor failed."""
        try:
            position = provider.current_position()
        except GeolocationUnavailableError as exc:
            self._logger.error("geolocation_unavailable", extra={"reason": str(exc)})
            return False
        self.set_position(position.lat, position.lng, dramatic=True)
        return True

    def collect(self, cache_key: str) -> TransferResult:
        cache = self.world.active_cache(cache_key)
        result = self.inventory.collect_from(cache)
        self._after_transfer(result, cache)
        return result

    def deposit(self, cache_key: str) -> TransferResult:
        cache = self.world.active_cache(cache_key)
        result = self.inventory.deposit_into(cache)
        self._after_transfer(result, cache)
        return result

    def reset(self) -> None:
        """Forget everything, return to the origin and drop the saved session."""
        self.inventory.clear()
        self.world.clear()
        self._position = self._origin
        self._history = [self._origin]
        self._inventory_touched = True
        self.world.reconcile(self._origin)
        self._gateway.clear()
        self._logger.info("session_reset")
        self.events.emit(SESSION_RESET, {})
        self.events.emit(INVENTORY_CHANGED, {"count": 0})
        self.events.emit(PLAYER_MOVED, {"lat": self._origin.lat, "lng": self._origin.lng})
        self.events.emit(DRAMATIC_MOVEMENT, {"lat": self._origin.lat, "lng": self._origin.lng})

    def snapshot(self) -> SessionSnapshot:
        self.world.flush()
        return SessionSnapshot(
            player_tokens=list(self.inventory.tokens),
            player_position=self._position,
            movement_history=list(self._history),
            archived_caches=sorted(self.world.archived.items()),
        )

    def save(self) -> None:
        self._gateway.save(self.snapshot())

    def load(self) -> bool:
        """Restore the saved session; ``False`` when there is none.

        A malformed snapshot raises ``SessionLoadError`` and leaves the
        session as it was.
        """
        snapshot = self._gateway.load()
        if snapshot is None:
            return False
        try:
            self.world.replace_archive(snapshot.archived_caches)
        except MementoError as exc:
            raise SessionLoadError(f"Stored session holds a corrupt cache memento: {exc}") from exc

        self.inventory.replace(snapshot.player_tokens)
        self._position = snapshot.player_position
        self._history = list(snapshot.movement_history) or [snapshot.player_position]
        self._inventory_touched = True
        self.world.reconcile(self._position)

        position = {"lat": self._position.lat, "lng": self._position.lng}
        self.events.emit(INVENTORY_CHANGED, {"count": len(self.inventory)})
        self.events.emit(PLAYER_MOVED, position)
        self.events.emit(DRAMATIC_MOVEMENT, position)
        return True

    def status_text(self) -> str:
        if not self._inventory_touched:
            return "No points yet..."
        return f"{len(self.inventory)} points accumulated"

    def _after_transfer(self, result: TransferResult, cache: Cache) -> None:
        if not result.moved:
            return
        self._inventory_touched = True
        self.events.emit(INVENTORY_CHANGED, {"count": len(self.inventory)})
        self.events.emit(CACHE_CHANGED, {"key": cache.key, "count": len(cache)})
