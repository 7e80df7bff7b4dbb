from __future__ import annotations

import asyncio
import random

import pytest

from conftest import PLAYERS, start_playing
from wakeng import actions, agent
from wakeng.agent import Decision, DecisionKind, Difficulty, apply_decision, decide, decide_async
from wakeng.engine import GameEngine
from wakeng.ismcts.search import SearchConfig
from wakeng.rules import PhaseError, TurnError
from wakeng.state import GameConfig, Phase

FAST = SearchConfig(iterations=20)


def test_bidding_and_taking_hole_decisions() -> None:
    engine = GameEngine(GameConfig(hole_size=4), rng=random.Random(4))
    engine.start_game(PLAYERS)
    state = engine.state
    assert state is not None

    while state.phase is Phase.BIDDING:
        decision = decide(engine.snapshot(), state.current_turn, Difficulty.HARD, random.Random(0))
        assert decision.kind is DecisionKind.BID
        assert decision.score in (0, 1, 2, 3, 4)
        apply_decision(engine, decision)

    assert state.digger is not None
    with pytest.raises(TurnError):
        decide(engine.snapshot(), (state.digger + 1) % 4, Difficulty.NORMAL, random.Random(0))
    decision = decide(engine.snapshot(), state.digger, Difficulty.NORMAL, random.Random(0))
    assert decision == Decision(DecisionKind.TAKE_HOLE, state.digger)
    apply_decision(engine, decision)
    assert state.phase is Phase.PLAYING


def test_decide_rejects_wrong_seat_and_finished_hand(playing_engine: GameEngine) -> None:
    state = playing_engine.snapshot()
    with pytest.raises(TurnError):
        decide(state, (state.current_turn + 1) % 4, Difficulty.EASY, random.Random(0))

    state.phase = Phase.FINISHED
    with pytest.raises(PhaseError):
        decide(state, state.current_turn, Difficulty.EASY, random.Random(0))


@pytest.mark.parametrize("difficulty", [Difficulty.EASY, Difficulty.NORMAL])
def test_play_decisions_are_legal(playing_engine: GameEngine, difficulty: Difficulty) -> None:
    state = playing_engine.snapshot()
    seat = state.current_turn

    decision = decide(state, seat, difficulty, random.Random(1), search_config=FAST)

    assert decision.kind is DecisionKind.PLAY
    assert decision.cards in actions.legal_moves(state, seat)
    assert decision.source == ("random" if difficulty is Difficulty.EASY else "search")
    apply_decision(playing_engine, decision)


def test_search_failure_falls_back_to_heuristic(
    playing_engine: GameEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _broken(*_args, **_kwargs):
        raise RuntimeError("search exploded")

    monkeypatch.setattr(agent, "run_search", _broken)
    state = playing_engine.snapshot()
    seat = state.current_turn

    decision = decide(state, seat, Difficulty.HARD, random.Random(0))

    assert decision.source == "heuristic"
    assert decision.cards in actions.legal_moves(state, seat)


def test_async_decision_matches_legality(playing_engine: GameEngine) -> None:
    state = playing_engine.snapshot()
    seat = state.current_turn

    decision = asyncio.run(
        decide_async(state, seat, Difficulty.NORMAL, random.Random(5), search_config=FAST)
    )

    assert decision.kind in (DecisionKind.PLAY, DecisionKind.PASS)
    assert decision.cards in actions.legal_moves(state, seat)


def test_pass_decision_is_applied(playing_engine: GameEngine) -> None:
    state = playing_engine.state
    assert state is not None
    seat = state.current_turn
    playing_engine.play_cards(seat, [state.hands[seat][-1].code])
    follower = state.current_turn

    apply_decision(playing_engine, Decision(DecisionKind.PASS, follower))

    assert state.pass_count == 1
    assert state.current_turn == (follower + 1) % 4


@pytest.mark.parametrize("seed", [1, 2])
def test_ai_seats_finish_a_hand(seed: int) -> None:
    engine = start_playing(seed)
    state = engine.state
    assert state is not None
    rng = random.Random(seed)

    for _ in range(400):
        if state.phase is Phase.FINISHED:
            break
        seat = state.current_turn
        difficulty = Difficulty.NORMAL if seat % 2 else Difficulty.EASY
        decision = decide(engine.snapshot(), seat, difficulty, rng, search_config=FAST)
        apply_decision(engine, decision)

    assert state.phase is Phase.FINISHED
    assert engine.ledger.pending is not None
