"""Rollout simulation for IS-MCTS."""

from __future__ import annotations

import random

from .. import actions
from ..rules import Side
from ..state import GameState, Phase
from . import policy

DEFAULT_MAX_DEPTH = 160


def leading_side(state: GameState) -> Side:
    """Side of the seat closest to going out; ties favour the lower seat."""

    counts = state.hand_counts()
    leader = min(range(len(counts)), key=counts.__getitem__)
    return Side.DIGGER if leader == state.digger else Side.OTHERS


def simulate(state: GameState, rng: random.Random, max_depth: int = DEFAULT_MAX_DEPTH) -> Side | None:
    """Play ``state`` out in place and return the winning side.

    When the depth cap is reached first, the side holding the smallest hand is
    reported as the winner.
    """

    if state.phase is Phase.FINISHED:
        return state.winner_side
    if state.phase is not Phase.PLAYING:
        return None

    for _ in range(max_depth):
        seat = state.current_turn
        moves = actions.legal_moves(state, seat)
        if not moves:
            break
        move = policy.choose_rollout_move(moves, len(state.hands[seat]), rng)
        actions.apply_move(state, seat, move)
        if state.phase is Phase.FINISHED:
            return state.winner_side
    return leading_side(state)
