"""Self-play harness for comparing AI difficulty presets."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from .agent import Difficulty, apply_decision, decide
from .engine import GameEngine
from .ismcts.search import SearchConfig
from .rules import Side
from .scoreboard import SettlementEntry
from .state import SEAT_COUNT, GameConfig, Phase, cards_conserved

__all__ = ["SeatBreakdown", "SelfPlayReport", "run_self_play"]

logger = logging.getLogger(__name__)

ACTION_LIMIT = 1000


@dataclass(frozen=True, slots=True)
class SeatBreakdown:
    """Aggregate statistics collected for a single seat across a benchmark."""

    seat: int
    difficulty: Difficulty
    wins: int
    digger_rounds: int
    digger_wins: int
    total: int


@dataclass(frozen=True, slots=True)
class SelfPlayReport:
    """Summary of a self-play benchmark."""

    rounds: int
    actions: int
    seats: tuple[SeatBreakdown, ...]
    entries: tuple[SettlementEntry, ...]

    @property
    def digger_win_rate(self) -> float:
        if not self.entries:
            return 0.0
        wins = sum(1 for entry in self.entries if entry.winner_side is Side.DIGGER)
        return wins / len(self.entries)


def _play_round(
    engine: GameEngine,
    names: Sequence[str],
    difficulties: Sequence[Difficulty],
    rng: random.Random,
    search_config: SearchConfig | None,
) -> int:
    engine.start_game(names)
    taken = 0
    for _ in range(ACTION_LIMIT):
        state = engine.state
        assert state is not None
        if state.phase is Phase.FINISHED:
            break
        seat = state.digger if state.phase is Phase.TAKING_HOLE else state.current_turn
        assert seat is not None
        decision = decide(
            engine.snapshot(), seat, difficulties[seat], rng, search_config=search_config
        )
        apply_decision(engine, decision)
        taken += 1
        if not cards_conserved(state):
            raise RuntimeError(f"card conservation broken after {decision.kind.value} by seat {seat}")
    else:
        raise RuntimeError(f"hand did not finish within {ACTION_LIMIT} actions")
    engine.set_settlement_multiplier(engine.config.host_seat, 1)
    return taken


def run_self_play(
    rounds: int,
    difficulties: Sequence[Difficulty],
    *,
    seed: int = 123,
    config: GameConfig | None = None,
    search_config: SearchConfig | None = None,
) -> SelfPlayReport:
    """Play ``rounds`` complete hands between AI seats and summarise them."""

    if rounds <= 0:
        raise ValueError("rounds must be positive")
    if len(difficulties) != SEAT_COUNT:
        raise ValueError(f"expected {SEAT_COUNT} difficulties, got {len(difficulties)}")

    rng = random.Random(seed)
    engine = GameEngine(config, rng=random.Random(rng.getrandbits(64)))
    names = [f"AI{seat}" for seat in range(SEAT_COUNT)]

    total_actions = 0
    for round_number in range(1, rounds + 1):
        total_actions += _play_round(engine, names, difficulties, rng, search_config)
        logger.debug("benchmark round %d done", round_number)

    entries = tuple(engine.ledger.entries)
    totals = engine.ledger.totals()
    seats = tuple(
        SeatBreakdown(
            seat=seat,
            difficulty=difficulties[seat],
            wins=sum(1 for entry in entries if entry.winner == seat),
            digger_rounds=sum(1 for entry in entries if entry.digger == seat),
            digger_wins=sum(
                1
                for entry in entries
                if entry.digger == seat and entry.winner_side is Side.DIGGER
            ),
            total=totals[seat],
        )
        for seat in range(SEAT_COUNT)
    )
    return SelfPlayReport(rounds=rounds, actions=total_actions, seats=seats, entries=entries)
