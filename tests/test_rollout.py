from __future__ import annotations

import random

import pytest

from conftest import start_playing
from wakeng.ismcts import rollout
from wakeng.rules import Side
from wakeng.state import Phase, cards_conserved


@pytest.mark.parametrize("seed", range(6))
def test_simulate_reaches_a_winner(seed: int) -> None:
    engine = start_playing(seed)
    state = engine.snapshot()

    winner = rollout.simulate(state, random.Random(seed), max_depth=1000)

    assert state.phase is Phase.FINISHED
    assert winner is state.winner_side
    assert state.hands[state.winner] == []  # type: ignore[index]
    assert cards_conserved(state)


def test_simulate_does_not_touch_the_source_state() -> None:
    engine = start_playing(2)
    live = engine.state
    assert live is not None
    counts = live.hand_counts()

    rollout.simulate(engine.snapshot(), random.Random(0))

    assert live.hand_counts() == counts
    assert live.phase is Phase.PLAYING


def test_depth_cap_scores_the_smallest_hand() -> None:
    engine = start_playing(8)
    state = engine.snapshot()
    digger = state.digger
    assert digger is not None

    expected = Side.DIGGER if min(range(4), key=state.hand_counts().__getitem__) == digger else Side.OTHERS
    assert rollout.simulate(state, random.Random(0), max_depth=0) is expected
    assert state.phase is Phase.PLAYING


def test_leading_side_breaks_ties_toward_lower_seat() -> None:
    engine = start_playing(5)
    state = engine.snapshot()
    state.digger = 0
    state.hands = [state.hands[1][:3], state.hands[1][3:6], state.hands[2], state.hands[3]]

    assert rollout.leading_side(state) is Side.DIGGER
    state.digger = 1
    assert rollout.leading_side(state) is Side.OTHERS


def test_simulate_outside_play_returns_none() -> None:
    engine = start_playing(1)
    state = engine.snapshot()
    state.phase = Phase.BIDDING

    assert rollout.simulate(state, random.Random(0)) is None
