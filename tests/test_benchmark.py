from __future__ import annotations

import pytest

from wakeng.agent import Difficulty
from wakeng.benchmark import run_self_play
from wakeng.ismcts.search import SearchConfig
from wakeng.state import GameConfig


def test_self_play_report_is_consistent() -> None:
    report = run_self_play(3, [Difficulty.EASY] * 4, seed=5)

    assert report.rounds == 3
    assert len(report.entries) == 3
    assert report.actions > 0
    assert sum(seat.total for seat in report.seats) == 0
    assert sum(seat.wins for seat in report.seats) == 3
    assert sum(seat.digger_rounds for seat in report.seats) == 3
    assert 0.0 <= report.digger_win_rate <= 1.0
    assert all(entry.multiplier == 1 for entry in report.entries)


def test_self_play_mixes_difficulties_with_holes() -> None:
    difficulties = [Difficulty.EASY, Difficulty.NORMAL, Difficulty.EASY, Difficulty.HARD]
    report = run_self_play(
        1,
        difficulties,
        seed=9,
        config=GameConfig(hole_size=6, include_jokers=True),
        search_config=SearchConfig(iterations=8),
    )

    assert [seat.difficulty for seat in report.seats] == difficulties
    assert sum(seat.total for seat in report.seats) == 0


def test_self_play_is_reproducible() -> None:
    first = run_self_play(2, [Difficulty.EASY] * 4, seed=11)
    second = run_self_play(2, [Difficulty.EASY] * 4, seed=11)

    assert first.entries == second.entries
    assert first.actions == second.actions


@pytest.mark.parametrize(
    ("rounds", "difficulties"),
    [(0, [Difficulty.EASY] * 4), (1, [Difficulty.EASY] * 3)],
)
def test_self_play_rejects_bad_arguments(rounds: int, difficulties: list[Difficulty]) -> None:
    with pytest.raises(ValueError):
        run_self_play(rounds, difficulties)
