"""Weighted rollout policy for IS-MCTS simulations."""

from __future__ import annotations

import random
from typing import Sequence

import numpy as np
from numba import njit

from ..actions import Move
from ..cards import TWO, compare_value
from ..rules import analyze_hand

KIND_PASS = 0
KIND_SINGLE = 1
KIND_GROUP = 2
KIND_SEQUENCE = 3

TOP_SINGLE_VALUE = compare_value(TWO)


@njit(cache=True)
def _rollout_weights(
    lengths: np.ndarray, kinds: np.ndarray, values: np.ndarray, top_value: int
) -> np.ndarray:
    size = lengths.shape[0]
    weights = np.empty(size, dtype=np.float64)
    for idx in range(size):
        kind = kinds[idx]
        if kind == KIND_PASS:
            weights[idx] = 0.25
        elif kind == KIND_SINGLE:
            if values[idx] >= top_value:
                weights[idx] = 0.05
            else:
                weights[idx] = 0.5
        else:
            weight = 1.0 + 2.0 * lengths[idx]
            if kind == KIND_SEQUENCE:
                weight += 5.0
            weights[idx] = weight
    return weights


def describe_moves(moves: Sequence[Move]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(lengths, kinds, values)`` arrays for ``moves``."""

    size = len(moves)
    lengths = np.zeros(size, dtype=np.int64)
    kinds = np.zeros(size, dtype=np.int64)
    values = np.zeros(size, dtype=np.int64)
    for idx, move in enumerate(moves):
        if not move:
            continue
        pattern = analyze_hand(move)
        if pattern is None:
            raise ValueError(f"move {move!r} does not form a pattern")
        lengths[idx] = len(move)
        values[idx] = pattern.value
        if pattern.type.is_sequence:
            kinds[idx] = KIND_SEQUENCE
        elif len(move) == 1:
            kinds[idx] = KIND_SINGLE
        else:
            kinds[idx] = KIND_GROUP
    return lengths, kinds, values


def rollout_weights(moves: Sequence[Move]) -> np.ndarray:
    lengths, kinds, values = describe_moves(moves)
    return _rollout_weights(lengths, kinds, values, TOP_SINGLE_VALUE)


def choose_rollout_move(moves: Sequence[Move], hand_size: int, rng: random.Random) -> Move:
    """Finish immediately when a move empties the hand, else sample by weight."""

    for move in moves:
        if len(move) == hand_size:
            return move
    if len(moves) == 1:
        return moves[0]
    weights = rollout_weights(moves)
    return rng.choices(list(moves), weights=weights.tolist(), k=1)[0]
