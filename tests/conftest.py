from __future__ import annotations

import pytest

from geocoin.grid import Grid
from geocoin.models import LatLng


class StubGenerator:
    """Deterministic generator returning configured values per seed string."""

    def __init__(self, values: dict[str, float] | None = None, default: float = 0.99) -> None:
        self.values = values or {}
        self.default = default
        self.calls: list[str] = []

    def __call__(self, seed: str) -> float:
        self.calls.append(seed)
        return self.values.get(seed, self.default)


@pytest.fixture
def make_generator():
    return StubGenerator


@pytest.fixture
def grid() -> Grid:
    return Grid(tile_width=1e-4, visibility_radius=8)


@pytest.fixture
def cell_centre() -> LatLng:
    """Centre of cell (0, 0) for a 1e-4 tile."""
    return LatLng(lat=0.5e-4, lng=0.5e-4)
