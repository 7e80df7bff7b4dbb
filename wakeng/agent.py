"""AI seat decisions: heuristic tier, search tier and the fallback between them."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from . import actions, evaluation
from .actions import Move
from .cards import Card
from .engine import GameEngine
from .evaluation import Difficulty
from .ismcts.search import SearchConfig, SearchResult, run_search, run_search_async
from .rules import PhaseError, TurnError
from .state import GameState, Phase

__all__ = [
    "Difficulty",
    "DecisionKind",
    "Decision",
    "SEARCH_PRESETS",
    "decide",
    "decide_async",
    "apply_decision",
]

logger = logging.getLogger(__name__)

SEARCH_PRESETS: Mapping[Difficulty, SearchConfig] = {
    Difficulty.NORMAL: SearchConfig(iterations=300, time_budget=0.3),
    Difficulty.HARD: SearchConfig(iterations=2000, time_budget=2.0),
}


class DecisionKind(str, Enum):
    BID = "bid"
    TAKE_HOLE = "take_hole"
    PLAY = "play"
    PASS = "pass"


@dataclass(frozen=True, slots=True)
class Decision:
    """An action chosen for ``seat``, ready to be applied through the engine."""

    kind: DecisionKind
    seat: int
    score: int | None = None
    cards: tuple[Card, ...] = ()
    source: str = "heuristic"

    @property
    def codes(self) -> list[str]:
        return [card.code for card in self.cards]


def _move_decision(seat: int, move: Move, source: str) -> Decision:
    if not move:
        return Decision(DecisionKind.PASS, seat, source=source)
    return Decision(DecisionKind.PLAY, seat, cards=tuple(move), source=source)


def _check_turn(state: GameState, seat: int) -> None:
    if state.phase is Phase.FINISHED:
        raise PhaseError("the hand is already finished")
    if state.phase is Phase.TAKING_HOLE:
        if seat != state.digger:
            raise TurnError("only the digger may take the hole")
    elif state.current_turn != seat:
        raise TurnError(f"it is seat {state.current_turn}'s turn, not seat {seat}'s")


def _non_play_decision(state: GameState, seat: int, difficulty: Difficulty) -> Decision | None:
    if state.phase is Phase.BIDDING:
        score = evaluation.choose_bid(state.hands[seat], state.bid_score, difficulty)
        return Decision(DecisionKind.BID, seat, score=score)
    if state.phase is Phase.TAKING_HOLE:
        return Decision(DecisionKind.TAKE_HOLE, seat)
    return None


def _fallback(
    state: GameState, seat: int, moves: list[Move], result: SearchResult | None
) -> Decision:
    if result is not None and result.move is not None and result.move in moves:
        return _move_decision(seat, result.move, "search")
    logger.warning("search produced no move for seat %d, using heuristic play", seat)
    return _move_decision(seat, evaluation.choose_heuristic_play(state, seat, moves), "heuristic")


def _config_for(difficulty: Difficulty, override: SearchConfig | None) -> SearchConfig:
    if override is not None:
        return override
    return SEARCH_PRESETS[difficulty]


def decide(
    state: GameState,
    seat: int,
    difficulty: Difficulty,
    rng: random.Random,
    *,
    search_config: SearchConfig | None = None,
) -> Decision:
    """Choose the next action for ``seat`` from ``state``.

    ``state`` should be a snapshot; the search tier only ever samples hidden
    hands from it. Search failures degrade to the heuristic tier so an AI seat
    always produces a legal action.
    """

    _check_turn(state, seat)
    early = _non_play_decision(state, seat, difficulty)
    if early is not None:
        return early

    moves = actions.legal_moves(state, seat)
    if difficulty is Difficulty.EASY:
        return _move_decision(seat, evaluation.choose_random_play(moves, rng), "random")

    result: SearchResult | None = None
    try:
        result = run_search(state, seat, rng, _config_for(difficulty, search_config))
    except Exception:
        logger.warning("search failed for seat %d", seat, exc_info=True)
    return _fallback(state, seat, moves, result)


async def decide_async(
    state: GameState,
    seat: int,
    difficulty: Difficulty,
    rng: random.Random,
    *,
    search_config: SearchConfig | None = None,
) -> Decision:
    """Async twin of :func:`decide` that yields during the search."""

    _check_turn(state, seat)
    early = _non_play_decision(state, seat, difficulty)
    if early is not None:
        return early

    moves = actions.legal_moves(state, seat)
    if difficulty is Difficulty.EASY:
        return _move_decision(seat, evaluation.choose_random_play(moves, rng), "random")

    result: SearchResult | None = None
    try:
        result = await run_search_async(state, seat, rng, _config_for(difficulty, search_config))
    except Exception:
        logger.warning("search failed for seat %d", seat, exc_info=True)
    return _fallback(state, seat, moves, result)


def apply_decision(engine: GameEngine, decision: Decision) -> None:
    """Apply ``decision`` through the engine's validated operations."""

    if decision.kind is DecisionKind.BID:
        assert decision.score is not None
        engine.bid(decision.seat, decision.score)
    elif decision.kind is DecisionKind.TAKE_HOLE:
        engine.take_hole(decision.seat)
    elif decision.kind is DecisionKind.PLAY:
        engine.play_cards(decision.seat, decision.codes)
    else:
        engine.pass_turn(decision.seat)
