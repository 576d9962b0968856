from __future__ import annotations

import json

import pytest

from geocoin.exceptions import MementoError, UnknownCacheError
from geocoin.grid import Grid
from geocoin.luck import seed_of
from geocoin.models import LatLng
from geocoin.telemetry.events import CACHES_RECONCILED, EventBus
from geocoin.world import WorldStore


def _active_contents(world: WorldStore) -> dict[str, list[str]]:
    return {key: [token.key for token in cache.tokens] for key, cache in world.active.items()}


def test_spawn_predicate_is_a_pure_function_of_the_cell() -> None:
    first = WorldStore(Grid(1e-4, 8), spawn_probability=0.1)
    second = WorldStore(Grid(1e-4, 8), spawn_probability=0.1)

    for i in range(-5, 5):
        for j in range(-5, 5):
            expected = first.is_cache_location(first.grid.canonicalize(i, j))
            assert first.is_cache_location(first.grid.canonicalize(i, j)) is expected
            assert second.is_cache_location(second.grid.canonicalize(i, j)) is expected


def test_reconcile_spawns_only_predicate_cells(make_generator, cell_centre: LatLng) -> None:
    generator = make_generator({"0,0": 0.05, "-1,1": 0.09, "0,0,initialValue": 0.37})
    world = WorldStore(Grid(1e-4, 8), spawn_probability=0.1, generator=generator)

    active = world.reconcile(cell_centre)

    assert sorted(active) == ["-1,1", "0,0"]
    assert len(active["0,0"]) == 37
    assert len(active["-1,1"]) == 99


def test_every_active_cache_is_archived_after_reconcile(make_generator, cell_centre: LatLng) -> None:
    world = WorldStore(Grid(1e-4, 2), spawn_probability=1.0, generator=make_generator(default=0.5))
    world.reconcile(cell_centre)

    archived = world.archived
    assert len(world.active) == 16
    for key, cache in world.active.items():
        assert archived[key] == cache.to_memento()


def test_reconcile_is_idempotent(cell_centre: LatLng) -> None:
    world = WorldStore(Grid(1e-4, 8), spawn_probability=0.1)

    once = _contents_after(world, cell_centre)
    twice = _contents_after(world, cell_centre)

    assert once == twice
    assert once


def _contents_after(world: WorldStore, position: LatLng) -> dict[str, list[str]]:
    world.reconcile(position)
    return _active_contents(world)


def test_moving_east_archives_trailing_cell_and_checks_leading_cell_once(make_generator, cell_centre: LatLng) -> None:
    generator = make_generator({"0,-2": 0.0, "0,2": 0.0}, default=0.5)
    world = WorldStore(Grid(1e-4, 2), spawn_probability=0.1, generator=generator)
    world.reconcile(cell_centre)
    assert sorted(world.active) == ["0,-2"]

    trailing = world.active_cache("0,-2")
    trailing.collect()
    trailing.collect()
    assert len(trailing) == 48

    generator.calls.clear()
    world.reconcile(LatLng(lat=0.5e-4, lng=1.5e-4))

    assert sorted(world.active) == ["0,2"]
    assert len(json.loads(world.archived["0,-2"])["tokens"]) == 48
    assert generator.calls.count(seed_of(0, 2)) == 1
    assert seed_of(0, -2) not in generator.calls


def test_cache_state_survives_leaving_and_reentering_view(make_generator, cell_centre: LatLng) -> None:
    generator = make_generator({"0,-2": 0.0}, default=0.5)
    world = WorldStore(Grid(1e-4, 2), spawn_probability=0.1, generator=generator)
    world.reconcile(cell_centre)
    world.active_cache("0,-2").collect()

    world.reconcile(LatLng(lat=0.5e-4, lng=1.5e-4))
    assert "0,-2" not in world.active
    world.reconcile(cell_centre)

    restored = world.active_cache("0,-2")
    assert len(restored) == 49
    assert restored.tokens[-1].key == "i:0j:-2$48"


def test_archive_entry_for_non_spawning_cell_is_never_activated(make_generator, cell_centre: LatLng) -> None:
    world = WorldStore(Grid(1e-4, 2), spawn_probability=0.1, generator=make_generator(default=0.5))
    memento = '{"location": {"i": 1, "j": 1}, "tokens": [{"key": "i:1j:1$0"}]}'
    world.replace_archive([("1,1", memento)])

    world.reconcile(cell_centre)

    assert world.active == {}
    assert world.archived == {"1,1": memento}


def test_replace_archive_rejects_corrupt_memento_without_change(make_generator, cell_centre: LatLng) -> None:
    world = WorldStore(Grid(1e-4, 2), spawn_probability=1.0, generator=make_generator(default=0.5))
    world.reconcile(cell_centre)
    before = world.archived

    with pytest.raises(MementoError):
        world.replace_archive([("0,0", '{"location": {"i": 0, "j": 0}, "tokens": []}'), ("0,1", "{broken")])

    assert world.archived == before
    assert len(world.active) == 16


def test_unknown_active_cache_raises(make_generator, cell_centre: LatLng) -> None:
    world = WorldStore(Grid(1e-4, 2), spawn_probability=0.0, generator=make_generator())
    world.reconcile(cell_centre)

    with pytest.raises(UnknownCacheError):
        world.active_cache("0,0")


def test_observers_only_see_the_rebuilt_active_set(make_generator, cell_centre: LatLng) -> None:
    bus = EventBus()
    world = WorldStore(Grid(1e-4, 2), spawn_probability=1.0, generator=make_generator(default=0.5), events=bus)
    seen: list[tuple[list[str], list[str]]] = []
    bus.subscribe(CACHES_RECONCILED, lambda _name, payload: seen.append((payload["active"], sorted(world.active))))

    world.reconcile(cell_centre)
    world.reconcile(LatLng(lat=0.5e-4, lng=1.5e-4))

    assert len(seen) == 2
    for announced, visible in seen:
        assert sorted(announced) == visible
        assert len(visible) == 16


def test_all_tokens_counts_each_cache_once(make_generator, cell_centre: LatLng) -> None:
    world = WorldStore(Grid(1e-4, 2), spawn_probability=1.0, generator=make_generator(default=0.05))
    world.reconcile(cell_centre)
    world.reconcile(LatLng(lat=0.5e-4, lng=1.5e-4))

    # 16 cells in view plus the 4 that scrolled out, five tokens each.
    assert len(world.all_tokens()) == 20 * 5
    assert len(set(token.key for token in world.all_tokens())) == 100


def test_replace_archive_rejects_memento_filed_under_another_key(make_generator, cell_centre: LatLng) -> None:
    world = WorldStore(Grid(1e-4, 2), spawn_probability=1.0, generator=make_generator(default=0.5))
    world.reconcile(cell_centre)
    before = world.archived

    with pytest.raises(MementoError):
        world.replace_archive([("0,0", '{"location": {"i": 5, "j": 5}, "tokens": [{"key": "x"}]}')])

    assert world.archived == before
    assert world.active_cache("0,0").key == "0,0"
