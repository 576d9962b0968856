"""Active/archived cache bookkeeping and movement reconciliation."""

from __future__ import annotations

import logging
from typing import Iterable

from geocoin.cache import Cache, parse_memento
from geocoin.exceptions import MementoError, UnknownCacheError
from geocoin.grid import Cell, Grid
from geocoin.luck import Generator, luck, seed_of
from geocoin.models import LatLng, Token
from geocoin.telemetry.events import CACHES_RECONCILED
from geocoin.telemetry.logging import EventSink


class WorldStore:
    """Owns the archive of every spawned cache and the set of caches in view.

    ``archived`` maps ``"i,j"`` to a memento and grows monotonically until a
    reset; ``active`` maps ``"i,j"`` to a live ``Cache`` for cells in the
    player's neighborhood. Whether a cell holds a cache at all is decided by
    the spawn predicate alone; the archive only decides how a cache starts.
    """

    def __init__(
        self,
        grid: Grid,
        *,
        spawn_probability: float,
        generator: Generator = luck,
        events: EventSink | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.grid = grid
        self.spawn_probability = spawn_probability
        self._generator = generator
        self._events = events
        self._logger = logger or logging.getLogger("geocoin.world")
        self._archived: dict[str, str] = {}
        self._active: dict[str, Cache] = {}

    @property
    def archived(self) -> dict[str, str]:
        """Read-only copy of the archive."""
        return dict(self._archived)

    @property
    def active(self) -> dict[str, Cache]:
        """Read-only copy of the active set; the caches themselves are live."""
        return dict(self._active)

    def active_cache(self, key: str) -> Cache:
        try:
            return self._active[key]
        except KeyError:
            raise UnknownCacheError(key) from None

    def is_cache_location(self, cell: Cell) -> bool:
        return self._generator(seed_of(cell.i, cell.j)) < self.spawn_probability

    def flush(self) -> None:
        """Write a memento of every active cache into the archive."""
        for key, cache in self._active.items():
            self._archived[key] = cache.to_memento()

    def reconcile(self, position: LatLng) -> dict[str, Cache]:
        """Archive the current active set and rebuild it around ``position``.

        The replacement set is assembled before it is installed, so a failure
        while restoring leaves the previous active set in place.
        """
        self.flush()

        rebuilt: dict[str, Cache] = {}
        spawned = 0
        restored = 0
        for cell in self.grid.neighborhood(position):
            if not self.is_cache_location(cell):
                continue
            cache = Cache(cell, grid=self.grid, generator=self._generator)
            memento = self._archived.get(cell.key)
            if memento is not None:
                cache.restore_from_memento(memento)
                restored += 1
            else:
                self._archived[cell.key] = cache.to_memento()
                spawned += 1
            rebuilt[cell.key] = cache

        self._active = rebuilt
        self._logger.info(
            "caches_reconciled",
            extra={"active": len(rebuilt), "spawned": spawned, "restored": restored, "archived": len(self._archived)},
        )
        if self._events is not None:
            self._events.emit(CACHES_RECONCILED, {"active": list(rebuilt)})
        return dict(rebuilt)

    def replace_archive(self, entries: Iterable[tuple[str, str]]) -> None:
        """Install a restored archive, validating every memento first.

        Every memento must describe the cell it is filed under. Clears the
        active set; the caller re-runs ``reconcile`` afterwards.
        """
        validated = {}
        for key, memento in entries:
            location = parse_memento(memento).location
            if f"{location.i},{location.j}" != key:
                raise MementoError(f"Memento filed under {key!r} describes cell {location.i},{location.j}")
            validated[key] = memento
        self._archived = validated
        self._active = {}

    def clear(self) -> None:
        self._archived.clear()
        self._active.clear()

    def all_tokens(self) -> list[Token]:
        """Every token held by any cache, active or archived-only."""
        tokens: list[Token] = []
        for cache in self._active.values():
            tokens.extend(cache.tokens)
        for key, memento in self._archived.items():
            if key not in self._active:
                tokens.extend(parse_memento(memento).tokens)
        return tokens
