from __future__ import annotations

import asyncio
import dataclasses
import random

import pytest

from conftest import start_playing
from wakeng import actions
from wakeng.cards import parse_cards, sort_cards
from wakeng.ismcts import search
from wakeng.ismcts.search import SearchConfig, run_search, run_search_async
from wakeng.state import GameConfig, GameState, Phase, TablePlay
from wakeng.rules import analyze_hand


def _only_pass_state() -> GameState:
    last_cards = tuple(parse_cards("H3 D3"))
    pattern = analyze_hand(last_cards)
    assert pattern is not None
    return GameState(
        config=GameConfig(),
        hands=[sort_cards(parse_cards(text)) for text in ("H9", "D4 D5", "C4", "S4")],
        phase=Phase.PLAYING,
        current_turn=1,
        digger=0,
        bid_score=1,
        last_move=TablePlay(seat=0, cards=last_cards, pattern=pattern),
    )


@pytest.mark.parametrize("seed", range(4))
def test_search_returns_a_legal_root_move(seed: int) -> None:
    engine = start_playing(seed)
    state = engine.snapshot()
    seat = state.current_turn

    result = run_search(state, seat, random.Random(seed), SearchConfig(iterations=40))

    legal = actions.legal_moves(state, seat)
    assert result.move in legal
    assert result.iterations == 40
    assert sum(child.visits for child in result.root.children.values()) <= 40
    assert state.hand_counts() == engine.state.hand_counts()  # type: ignore[union-attr]


def test_search_samples_worlds_for_the_searching_seat(monkeypatch: pytest.MonkeyPatch) -> None:
    engine = start_playing(6)
    state = engine.snapshot()
    seat = state.current_turn
    observers: list[int] = []
    real = search.sample_world

    def _recording(world_state, rng, observer):
        observers.append(observer)
        return real(world_state, rng, observer)

    monkeypatch.setattr(search, "sample_world", _recording)
    run_search(state, seat, random.Random(1), SearchConfig(iterations=10))

    assert observers == [seat] * 10


def test_single_option_returns_without_searching(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*_args, **_kwargs):
        raise AssertionError("no world should be sampled")

    monkeypatch.setattr(search, "sample_world", _fail)
    result = run_search(_only_pass_state(), 1, random.Random(0))

    assert result.move == actions.PASS
    assert result.iterations == 0


def test_search_without_moves_returns_none() -> None:
    state = _only_pass_state()
    result = run_search(state, 2, random.Random(0))

    assert result.move is None
    assert result.iterations == 0


def test_time_budget_stops_the_search() -> None:
    engine = start_playing(3)
    state = engine.snapshot()
    config = SearchConfig(iterations=10_000_000, time_budget=0.05)

    result = run_search(state, state.current_turn, random.Random(0), config)

    assert 0 < result.iterations < 10_000_000
    assert result.move is not None


def test_async_search_yields_to_the_loop(monkeypatch: pytest.MonkeyPatch) -> None:
    engine = start_playing(7)
    state = engine.snapshot()
    seat = state.current_turn
    yields = 0
    real_sleep = asyncio.sleep

    async def _counting_sleep(delay: float) -> None:
        nonlocal yields
        yields += 1
        await real_sleep(delay)

    monkeypatch.setattr(search.asyncio, "sleep", _counting_sleep)
    config = SearchConfig(iterations=30, yield_every=10)
    result = asyncio.run(run_search_async(state, seat, random.Random(2), config))

    assert yields == 3
    assert result.iterations == 30
    assert result.move in actions.legal_moves(state, seat)


def test_search_config_is_immutable() -> None:
    config = SearchConfig(iterations=5)

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.iterations = 10  # type: ignore[misc]
    assert dataclasses.replace(config, iterations=10).iterations == 10
    assert config.iterations == 5
