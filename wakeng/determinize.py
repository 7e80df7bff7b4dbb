"""Determinization utilities for information-set MCTS."""

from __future__ import annotations

import random
from typing import Sequence

from .cards import Card, full_deck, sort_cards
from .state import GameState, Phase


def known_cards(state: GameState, observer: int) -> set[Card]:
    """Cards whose location ``observer`` knows without looking at other hands."""

    known = set(state.hands[observer])
    for pile in state.played:
        known.update(pile)
    if state.phase is not Phase.BIDDING:
        known.update(state.hole)
    return known


def pinned_cards(state: GameState, observer: int) -> list[Card]:
    """Revealed hole cards that must still sit in an opposing digger's hand."""

    digger = state.digger
    if digger is None or digger == observer or state.phase is not Phase.PLAYING:
        return []
    played = set(state.played[digger])
    return [card for card in state.revealed_hole if card not in played]


def _opponents(state: GameState, observer: int) -> list[int]:
    return [seat for seat in range(state.seat_count) if seat != observer]


def sample_world(state: GameState, rng: random.Random, observer: int) -> GameState:
    """Return a determinized copy of ``state`` seen from ``observer``.

    Every card the observer cannot see is dealt at random to the opponents,
    keeping their public hand counts. While bidding, the hole is hidden too and
    is redealt along with the hands.
    """

    world = state.clone()
    known = known_cards(state, observer)
    pinned = pinned_cards(state, observer)
    pinned_set = set(pinned)
    pool = [
        card
        for card in full_deck(state.config.include_jokers)
        if card not in known and card not in pinned_set
    ]
    rng.shuffle(pool)

    hole_hidden = state.phase is Phase.BIDDING
    needed = sum(len(state.hands[seat]) for seat in _opponents(state, observer))
    needed -= len(pinned)
    if hole_hidden:
        needed += len(state.hole)
    if needed != len(pool):
        raise RuntimeError(
            f"hidden pool holds {len(pool)} cards but {needed} are unaccounted for"
        )

    offset = 0
    for seat in _opponents(state, observer):
        count = len(state.hands[seat])
        fixed: Sequence[Card] = pinned if seat == state.digger else ()
        take = count - len(fixed)
        if take < 0:
            raise RuntimeError(f"seat {seat} holds fewer cards than its pinned hole cards")
        world.hands[seat] = sort_cards([*fixed, *pool[offset : offset + take]])
        offset += take
    if hole_hidden:
        world.hole = pool[offset : offset + len(state.hole)]
    return world
