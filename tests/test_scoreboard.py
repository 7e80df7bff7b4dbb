from __future__ import annotations

import pytest

from wakeng import scoreboard
from wakeng.rules import LegalityError, Side, StateError


def _pending(round_number: int = 1, side: Side = Side.OTHERS) -> scoreboard.PendingSettlement:
    return scoreboard.PendingSettlement(
        round_number=round_number,
        bid_score=3,
        digger=1,
        winner=2 if side is Side.OTHERS else 1,
        winner_side=side,
        deltas=scoreboard.base_deltas(4, 1, 3, side),
    )


def test_base_deltas_by_winning_side() -> None:
    assert scoreboard.base_deltas(4, 1, 3, Side.OTHERS) == (3, -9, 3, 3)
    assert scoreboard.base_deltas(4, 0, 2, Side.DIGGER) == (6, -2, -2, -2)


def test_ledger_applies_multiplier_once() -> None:
    ledger = scoreboard.SettlementLedger(num_players=4)
    ledger.open(_pending())

    assert ledger.totals() == [0, 0, 0, 0]
    entry = ledger.apply_multiplier(2)

    assert entry.deltas == (6, -18, 6, 6)
    assert entry.multiplier == 2
    assert ledger.totals() == [6, -18, 6, 6]
    assert ledger.pending is None
    with pytest.raises(StateError):
        ledger.apply_multiplier(2)


def test_ledger_accumulates_rounds() -> None:
    ledger = scoreboard.SettlementLedger(num_players=4)
    ledger.open(_pending(1, Side.OTHERS))
    ledger.apply_multiplier(1)
    ledger.open(_pending(2, Side.DIGGER))
    ledger.apply_multiplier(8)

    assert [entry.round_number for entry in ledger.entries] == [1, 2]
    assert ledger.totals() == [3 - 24, -9 + 72, 3 - 24, 3 - 24]
    assert sum(ledger.totals()) == 0


@pytest.mark.parametrize("multiplier", [0, 3, 16, -2])
def test_ledger_rejects_unknown_multiplier(multiplier: int) -> None:
    ledger = scoreboard.SettlementLedger(num_players=4)
    ledger.open(_pending())

    with pytest.raises(LegalityError):
        ledger.apply_multiplier(multiplier)
    assert ledger.pending is not None
    assert ledger.totals() == [0, 0, 0, 0]


def test_ledger_refuses_second_pending() -> None:
    ledger = scoreboard.SettlementLedger(num_players=4)
    ledger.open(_pending())
    with pytest.raises(StateError):
        ledger.open(_pending(2))


def test_ledger_validates_player_count() -> None:
    with pytest.raises(ValueError):
        scoreboard.SettlementLedger(num_players=0)
    ledger = scoreboard.SettlementLedger(num_players=3)
    with pytest.raises(ValueError):
        ledger.open(_pending())
