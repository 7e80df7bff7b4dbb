"""Hand evaluation and the heuristic decision tier."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np

from .actions import PASS, Move
from .cards import ACE, BLACK_JOKER, LOWEST_RANK, RED_JOKER, TWO, Card
from .rules import MAX_BID, VALID_BIDS, analyze_hand, is_forced_bid
from .state import GameState

__all__ = [
    "Difficulty",
    "HandStrength",
    "hand_strength",
    "choose_bid",
    "choose_random_play",
    "choose_heuristic_play",
]


class Difficulty(str, Enum):
    """AI strength presets."""

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


# Per-difficulty (rating threshold, wanted bid) pairs, checked in order.
_BID_LOOKUP: dict[Difficulty, tuple[tuple[float, int], ...]] = {
    Difficulty.EASY: ((8.5, 2),),
    Difficulty.NORMAL: ((9.0, 3), (7.5, 2)),
    Difficulty.HARD: ((9.5, 4), (8.5, 3), (float("-inf"), 1)),
}

_SHAPE_WEIGHT = 0.25


@dataclass(frozen=True, slots=True)
class HandStrength:
    """Structural signals used to size a bid."""

    average_value: float
    jokers: int
    threes: int
    twos: int
    aces: int
    quads: int

    @property
    def shape_points(self) -> float:
        return (
            self.jokers * 4.0
            + self.threes * 3.0
            + self.twos * 2.0
            + self.aces * 1.0
            + self.quads * 3.0
        )

    @property
    def rating(self) -> float:
        return self.average_value + _SHAPE_WEIGHT * self.shape_points


def hand_strength(hand: Sequence[Card]) -> HandStrength:
    if not hand:
        return HandStrength(0.0, 0, 0, 0, 0, 0)
    values = np.fromiter((card.value for card in hand), dtype=np.float64, count=len(hand))
    ranks = np.fromiter((card.rank for card in hand), dtype=np.int64, count=len(hand))
    counts = np.bincount(ranks, minlength=RED_JOKER + 1)
    return HandStrength(
        average_value=float(values.mean()),
        jokers=int(counts[BLACK_JOKER] + counts[RED_JOKER]),
        threes=int(counts[LOWEST_RANK]),
        twos=int(counts[TWO]),
        aces=int(counts[ACE]),
        quads=int(np.count_nonzero(counts == 4)),
    )


def choose_bid(hand: Sequence[Card], current_bid: int, difficulty: Difficulty) -> int:
    """Return the bid to submit given ``hand`` and the standing ``current_bid``.

    The wanted bid comes from the difficulty lookup; the highest legal bid not
    above it is returned, or ``0`` when none exceeds the standing bid.
    """

    if is_forced_bid(hand):
        return MAX_BID
    rating = hand_strength(hand).rating
    want = 0
    for threshold, bid in _BID_LOOKUP[difficulty]:
        if rating > threshold:
            want = bid
            break
    candidates = [bid for bid in VALID_BIDS if 0 < bid <= want and bid > current_bid]
    return candidates[-1] if candidates else 0


def choose_random_play(moves: Sequence[Move], rng: random.Random) -> Move:
    """Uniform choice over plays; pass only when nothing else is legal."""

    plays = [move for move in moves if move]
    if not plays:
        return PASS
    return plays[rng.randrange(len(plays))]


def _play_cost(move: Move) -> tuple[int, int]:
    pattern = analyze_hand(move)
    value = pattern.value if pattern is not None else 99
    return value, len(move)


def choose_heuristic_play(state: GameState, seat: int, moves: Sequence[Move]) -> Move:
    """Finish when possible, otherwise shed the cheapest, shortest play."""

    plays = [move for move in moves if move]
    if not plays:
        return PASS
    hand_size = len(state.hands[seat])
    for move in plays:
        if len(move) == hand_size:
            return move
    return min(plays, key=_play_cost)
