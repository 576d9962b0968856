"""Canonical spatial grid.

The grid turns continuous coordinates into discrete cells and is the only
place cells are created. Every ``(i, j)`` maps to exactly one ``Cell`` object
for the lifetime of the grid, so cells can be compared by identity.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from geocoin.models import LatLng


@dataclass(frozen=True, slots=True)
class Cell:
    """A grid tile; obtain instances through ``Grid.canonicalize``."""

    i: int
    j: int

    @property
    def key(self) -> str:
        return f"{self.i},{self.j}"


@dataclass(frozen=True, slots=True)
class Bounds:
    """Half-open rectangle ``[south, north) x [west, east)`` in degrees."""

    south: float
    west: float
    north: float
    east: float

    def contains(self, point: LatLng) -> bool:
        return self.south <= point.lat < self.north and self.west <= point.lng < self.east


class Grid:
    """Owns the canonical cell table for one tile width and visibility radius."""

    def __init__(self, tile_width: float, visibility_radius: int) -> None:
        if tile_width <= 0:
            raise ValueError("tile_width must be positive")
        self.tile_width = tile_width
        self.visibility_radius = visibility_radius
        self._known_cells: dict[tuple[int, int], Cell] = {}

    def __len__(self) -> int:
        return len(self._known_cells)

    def canonicalize(self, i: int, j: int) -> Cell:
        """Return the unique cell for ``(i, j)``, creating it on first request."""
        coords = (int(i), int(j))
        cell = self._known_cells.get(coords)
        if cell is None:
            cell = Cell(*coords)
            self._known_cells[coords] = cell
        return cell

    def cell_for_key(self, key: str) -> Cell:
        """Canonical cell for an ``"i,j"`` cache key."""
        i, j = key.split(",")
        return self.canonicalize(int(i), int(j))

    def cell_for_point(self, point: LatLng) -> Cell:
        return self.canonicalize(
            math.floor(point.lat / self.tile_width),
            math.floor(point.lng / self.tile_width),
        )

    def cell_bounds(self, cell: Cell) -> Bounds:
        width = self.tile_width
        return Bounds(
            south=cell.i * width,
            west=cell.j * width,
            north=(cell.i + 1) * width,
            east=(cell.j + 1) * width,
        )

    def neighborhood(self, point: LatLng, radius: int | None = None) -> list[Cell]:
        """Cells around ``point`` with offsets in ``[-radius, radius)`` on both axes.

        The range is half-open, so the square reaches ``radius`` cells on the
        negative side and ``radius - 1`` on the positive side. Ordered by ``i``
        then ``j``.
        """
        radius = self.visibility_radius if radius is None else radius
        origin = self.cell_for_point(point)
        return [
            self.canonicalize(origin.i + di, origin.j + dj)
            for di in range(-radius, radius)
            for dj in range(-radius, radius)
        ]
