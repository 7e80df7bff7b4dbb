"""Legal move generation and state transitions for the playing phase."""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Iterator, Sequence

from .cards import Card
from .rules import (
    SEQUENCE_HIGH,
    SEQUENCE_LOW,
    HandPattern,
    Side,
    analyze_hand,
    beats,
    is_max_play,
)
from .state import GameState, Phase, TablePlay

Move = tuple[Card, ...]
PASS: Move = ()

# Minimum number of steps for straights, consecutive pairs and triplets.
_MIN_STEPS = {1: 3, 2: 3, 3: 2}


class PlayOutcome(str, Enum):
    """What happened to the turn after a play was applied."""

    NEXT = "next"
    MAX_PLAY = "max_play"
    FINISHED = "finished"


def _by_rank(hand: Sequence[Card]) -> dict[int, list[Card]]:
    groups: dict[int, list[Card]] = defaultdict(list)
    for card in hand:
        groups[card.rank].append(card)
    return groups


def generate_plays(hand: Sequence[Card]) -> Iterator[Move]:
    """Yield one representative move for every distinct pattern ``hand`` can form.

    Suits never matter for legality, so a move is identified by its ranks and
    the first cards of each rank in hand order are used.
    """

    groups = _by_rank(hand)
    for rank in sorted(groups):
        cards = groups[rank]
        for size in range(1, len(cards) + 1):
            yield tuple(cards[:size])

    for group in (1, 2, 3):
        min_steps = _MIN_STEPS[group]
        for low in range(SEQUENCE_LOW, SEQUENCE_HIGH + 1):
            run: list[Card] = []
            for rank in range(low, SEQUENCE_HIGH + 1):
                cards = groups.get(rank, [])
                if len(cards) < group:
                    break
                run.extend(cards[:group])
                if rank - low + 1 >= min_steps:
                    yield tuple(run)


def move_key(move: Sequence[Card]) -> tuple[int, ...]:
    """Suit-free identity of a move, shared across determinized worlds."""

    return tuple(sorted(card.rank for card in move))


def is_following(state: GameState, seat: int) -> bool:
    """``True`` when ``seat`` must beat another seat's play or pass."""

    return state.last_move is not None and state.last_move.seat != seat


def legal_moves(state: GameState, seat: int) -> list[Move]:
    """Return every legal move for ``seat``; ``PASS`` is included when following."""

    if state.phase is not Phase.PLAYING or state.current_turn != seat:
        return []
    hand = state.hands[seat]
    if not is_following(state, seat):
        return list(generate_plays(hand))

    assert state.last_move is not None
    target = state.last_move.pattern
    moves: list[Move] = []
    for move in generate_plays(hand):
        if len(move) != len(state.last_move.cards):
            continue
        pattern = analyze_hand(move)
        if pattern is not None and beats(pattern, target):
            moves.append(move)
    moves.append(PASS)
    return moves


def finish_hand(state: GameState, seat: int) -> None:
    state.phase = Phase.FINISHED
    state.winner = seat
    state.winner_side = Side.DIGGER if seat == state.digger else Side.OTHERS


def apply_play(
    state: GameState,
    seat: int,
    cards: Sequence[Card],
    pattern: HandPattern | None = None,
) -> PlayOutcome:
    """Apply a play without validation and return how the turn moved on."""

    if pattern is None:
        pattern = analyze_hand(cards)
        if pattern is None:
            raise ValueError("cards do not form a pattern")
    hand = state.hands[seat]
    for card in cards:
        hand.remove(card)
    play = TablePlay(seat=seat, cards=tuple(cards), pattern=pattern)
    state.played[seat].extend(cards)
    state.moves[seat].append(play)
    state.last_move = play
    state.pass_count = 0

    if not hand:
        finish_hand(state, seat)
        return PlayOutcome.FINISHED
    if is_max_play(pattern, state.config.include_jokers):
        state.current_turn = seat
        return PlayOutcome.MAX_PLAY
    state.current_turn = state.next_seat(seat)
    return PlayOutcome.NEXT


def apply_pass(state: GameState, seat: int) -> bool:
    """Apply a pass without validation; return ``True`` when the trick closed."""

    state.pass_count += 1
    state.current_turn = state.next_seat(seat)
    if state.last_move is not None and state.pass_count >= state.seat_count - 1:
        state.current_turn = state.last_move.seat
        state.last_move = None
        state.pass_count = 0
        return True
    return False


def apply_move(state: GameState, seat: int, move: Move) -> None:
    """Apply ``move`` for ``seat``; the empty move is a pass."""

    if move:
        apply_play(state, seat, move)
    else:
        apply_pass(state, seat)
