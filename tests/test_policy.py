from __future__ import annotations

import random

import numpy as np
import pytest

from wakeng.actions import PASS
from wakeng.cards import parse_cards
from wakeng.ismcts import policy


def _move(text: str) -> tuple:
    return tuple(parse_cards(text))


def test_rollout_weights_by_move_kind() -> None:
    moves = [
        PASS,
        _move("H5"),
        _move("H15"),
        _move("S3"),
        _move("H9 D9"),
        _move("H4 D5 C6"),
        _move("H4 D4 H5 D5 H6 D6"),
    ]
    weights = policy.rollout_weights(moves)

    np.testing.assert_allclose(weights, [0.25, 0.5, 0.05, 0.05, 5.0, 12.0, 18.0])


def test_describe_moves_rejects_non_patterns() -> None:
    with pytest.raises(ValueError):
        policy.describe_moves([_move("H4 D7")])


def test_choose_rollout_move_finishes_when_possible() -> None:
    moves = [PASS, _move("H5"), _move("H9 D9")]
    assert policy.choose_rollout_move(moves, 2, random.Random(0)) == _move("H9 D9")


def test_choose_rollout_move_returns_only_option() -> None:
    assert policy.choose_rollout_move([PASS], 5, random.Random(0)) == PASS


def test_choose_rollout_move_prefers_heavy_moves() -> None:
    moves = [PASS, _move("H15"), _move("H4 D5 C6 S7 H8")]
    rng = random.Random(3)
    picks = [policy.choose_rollout_move(moves, 12, rng) for _ in range(200)]

    assert all(pick in moves for pick in picks)
    assert picks.count(moves[2]) > picks.count(moves[1])
    assert picks.count(moves[2]) > picks.count(PASS)
