"""Settlement of finished hands and the per-room score ledger."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final

from .rules import LegalityError, Side, StateError

__all__ = [
    "ALLOWED_MULTIPLIERS",
    "base_deltas",
    "PendingSettlement",
    "SettlementEntry",
    "SettlementLedger",
]

logger = logging.getLogger(__name__)

ALLOWED_MULTIPLIERS: Final[tuple[int, ...]] = (1, 2, 4, 8)


def base_deltas(seat_count: int, digger: int, bid_score: int, winner_side: Side) -> tuple[int, ...]:
    """Return per-seat score changes before the host multiplier.

    The digger plays against everyone else, so it wins or loses the bid once
    per opponent while each opponent moves by the bid alone.
    """

    others = seat_count - 1
    digger_delta = bid_score * others
    if winner_side is Side.OTHERS:
        digger_delta = -digger_delta
    other_delta = -digger_delta // others
    return tuple(digger_delta if seat == digger else other_delta for seat in range(seat_count))


@dataclass(frozen=True, slots=True)
class PendingSettlement:
    """Outcome of a finished hand awaiting the host's multiplier."""

    round_number: int
    bid_score: int
    digger: int
    winner: int
    winner_side: Side
    deltas: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class SettlementEntry:
    """Immutable ledger row written once a multiplier was applied."""

    round_number: int
    bid_score: int
    digger: int
    winner: int
    winner_side: Side
    multiplier: int
    deltas: tuple[int, ...]


@dataclass(slots=True)
class SettlementLedger:
    """Append-only ledger with running totals per seat."""

    num_players: int
    entries: list[SettlementEntry] = field(default_factory=list)
    pending: PendingSettlement | None = None
    _totals: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ValueError("num_players must be positive")
        self._totals = [0 for _ in range(self.num_players)]

    def open(self, pending: PendingSettlement) -> None:
        """Hold ``pending`` until a multiplier is applied."""

        if self.pending is not None:
            raise StateError("a settlement is already pending")
        if len(pending.deltas) != self.num_players:
            raise ValueError("delta count does not match number of players")
        self.pending = pending

    def apply_multiplier(self, multiplier: int) -> SettlementEntry:
        """Settle the pending hand with ``multiplier`` and record it."""

        if multiplier not in ALLOWED_MULTIPLIERS:
            raise LegalityError(f"multiplier must be one of {ALLOWED_MULTIPLIERS}")
        pending = self.pending
        if pending is None:
            raise StateError("no settlement is pending")

        deltas = tuple(delta * multiplier for delta in pending.deltas)
        entry = SettlementEntry(
            round_number=pending.round_number,
            bid_score=pending.bid_score,
            digger=pending.digger,
            winner=pending.winner,
            winner_side=pending.winner_side,
            multiplier=multiplier,
            deltas=deltas,
        )
        for seat, delta in enumerate(deltas):
            self._totals[seat] += delta
        self.entries.append(entry)
        self.pending = None
        logger.info(
            "settled round %d x%d: deltas=%s totals=%s",
            entry.round_number,
            multiplier,
            list(deltas),
            self._totals,
        )
        return entry

    def totals(self) -> list[int]:
        """Return the running totals in seat order."""

        return list(self._totals)
