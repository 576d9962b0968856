from __future__ import annotations

import json

import pytest

from geocoin.cache import Cache, initial_token_count
from geocoin.exceptions import EmptyCacheError, MementoError
from geocoin.grid import Grid
from geocoin.models import Token


def test_initial_population_from_generator(grid: Grid, make_generator) -> None:
    generator = make_generator({"0,0,initialValue": 0.37})
    cache = Cache(grid.canonicalize(0, 0), grid=grid, generator=generator)

    assert len(cache) == 37
    assert cache.tokens[0].key == "i:0j:0$0"
    assert cache.tokens[-1].key == "i:0j:0$36"
    assert [token.key for token in cache.tokens] == [f"i:0j:0${n}" for n in range(37)]


def test_initial_count_floors(grid: Grid, make_generator) -> None:
    assert initial_token_count(grid.canonicalize(1, 2), make_generator({"1,2,initialValue": 0.999})) == 99
    assert initial_token_count(grid.canonicalize(1, 2), make_generator({"1,2,initialValue": 0.0})) == 0
    assert initial_token_count(grid.canonicalize(1, 2), make_generator({"1,2,initialValue": 0.019})) == 1


def test_token_keys_encode_negative_cells(grid: Grid, make_generator) -> None:
    cache = Cache(grid.canonicalize(-4, 7), grid=grid, generator=make_generator(default=0.02))
    assert [token.key for token in cache.tokens] == ["i:-4j:7$0", "i:-4j:7$1"]
    assert cache.key == "-4,7"


def test_two_fresh_caches_for_same_cell_match(grid: Grid) -> None:
    first = Cache(grid.canonicalize(12, -9), grid=grid)
    second = Cache(grid.canonicalize(12, -9), grid=grid)
    assert first.tokens == second.tokens


def test_memento_format(grid: Grid, make_generator) -> None:
    cache = Cache(grid.canonicalize(3, -1), grid=grid, generator=make_generator(default=0.02))
    payload = json.loads(cache.to_memento())

    assert payload == {
        "location": {"i": 3, "j": -1},
        "tokens": [{"key": "i:3j:-1$0"}, {"key": "i:3j:-1$1"}],
    }


def test_memento_round_trip_keeps_order(grid: Grid, make_generator) -> None:
    source = Cache(grid.canonicalize(0, 0), grid=grid, generator=make_generator(default=0.05))
    source.collect()
    source.deposit(Token(key="i:9j:9$4"))
    target = Cache(grid.canonicalize(5, 5), grid=grid, generator=make_generator(default=0.5))

    target.restore_from_memento(source.to_memento())

    assert target.location is grid.canonicalize(0, 0)
    assert target.tokens == source.tokens
    assert target.to_memento() == source.to_memento()


def test_restore_accepts_empty_token_list(grid: Grid, make_generator) -> None:
    cache = Cache(grid.canonicalize(1, 1), grid=grid, generator=make_generator(default=0.5))
    cache.restore_from_memento('{"location": {"i": 1, "j": 1}, "tokens": []}')
    assert cache.tokens == []


@pytest.mark.parametrize(
    "memento",
    [
        "not json",
        '{"location": {"i": 0}, "tokens": []}',
        '{"location": {"i": 0, "j": 0}, "tokens": [{"nokey": 1}]}',
        '{"tokens": []}',
        "",
    ],
)
def test_malformed_memento_leaves_cache_untouched(grid: Grid, make_generator, memento: str) -> None:
    cache = Cache(grid.canonicalize(2, 2), grid=grid, generator=make_generator(default=0.03))
    before = list(cache.tokens)

    with pytest.raises(MementoError):
        cache.restore_from_memento(memento)

    assert cache.tokens == before
    assert cache.location is grid.canonicalize(2, 2)


def test_non_text_memento_is_rejected(grid: Grid, make_generator) -> None:
    cache = Cache(grid.canonicalize(2, 2), grid=grid, generator=make_generator(default=0.03))
    with pytest.raises(MementoError):
        cache.restore_from_memento({"location": {"i": 2, "j": 2}, "tokens": []})


def test_collect_is_lifo_and_empty_cache_raises(grid: Grid, make_generator) -> None:
    cache = Cache(grid.canonicalize(0, 0), grid=grid, generator=make_generator(default=0.02))

    assert cache.collect().key == "i:0j:0$1"
    assert cache.collect().key == "i:0j:0$0"
    with pytest.raises(EmptyCacheError):
        cache.collect()


def test_collect_then_deposit_restores_order(grid: Grid, make_generator) -> None:
    cache = Cache(grid.canonicalize(0, 0), grid=grid, generator=make_generator(default=0.03))
    original = list(cache.tokens)

    token = cache.collect()
    cache.deposit(token)

    assert len(cache) == 3
    assert cache.tokens == original


def test_preview_lists_newest_first(grid: Grid, make_generator) -> None:
    cache = Cache(grid.canonicalize(0, 0), grid=grid, generator=make_generator(default=0.08))

    assert [token.key for token in cache.preview(3)] == ["i:0j:0$7", "i:0j:0$6", "i:0j:0$5"]
    assert len(cache.preview(20)) == 8
    assert cache.preview(0) == []
