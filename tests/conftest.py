from __future__ import annotations

import random

import pytest

from wakeng.cards import Card, parse_cards
from wakeng.engine import GameEngine
from wakeng.state import GameConfig, Phase

PLAYERS = ["north", "east", "south", "west"]

# Contiguous blocks of 13 cards: seat 0 holds the heart four, nobody is forced to bid.
SCENARIO_HANDS = (
    "H3 H4 D4 H5 D5 H6 D6 H7 D7 H8 D8 H9 D9",
    "D3 C4 S4 C5 S5 C6 S6 C7 S7 C8 S8 C9 S9",
    "C3 H10 D10 C10 H11 D11 C11 H12 D12 C12 H13 D13 C13",
    "S3 S10 S11 S12 S13 H14 D14 C14 S14 H15 D15 C15 S15",
)


def deck_from(*hands: str) -> list[Card]:
    return [card for hand in hands for card in parse_cards(hand)]


@pytest.fixture
def scenario_deck() -> list[Card]:
    return deck_from(*SCENARIO_HANDS)


def start_playing(seed: int, *, hole_size: int = 4) -> GameEngine:
    """Deal a seeded hand, pass every bid and take the hole."""

    engine = GameEngine(GameConfig(hole_size=hole_size), rng=random.Random(seed))
    engine.start_game(PLAYERS)
    state = engine.state
    assert state is not None
    while state.phase is Phase.BIDDING:
        engine.bid(state.current_turn, 0)
    assert state.digger is not None
    engine.take_hole(state.digger)
    return engine


@pytest.fixture
def playing_engine() -> GameEngine:
    return start_playing(11)
