"""Card abstractions and deck helpers for dig-the-hole."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence

LOWEST_RANK = 3
ACE = 14
TWO = 15
BLACK_JOKER = 16
RED_JOKER = 17

RANK_LABELS: dict[int, str] = {
    **{rank: str(rank) for rank in range(3, 11)},
    11: "J",
    12: "Q",
    13: "K",
    ACE: "A",
    TWO: "2",
    BLACK_JOKER: "BJ",
    RED_JOKER: "RJ",
}


class Suit(str, Enum):
    """Card suits; the value doubles as the code prefix."""

    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"
    SPADES = "S"
    JOKER = "J"

    @classmethod
    def standard(cls) -> tuple["Suit", ...]:
        return (cls.HEARTS, cls.DIAMONDS, cls.CLUBS, cls.SPADES)


_SUIT_ORDER: dict[Suit, int] = {suit: idx for idx, suit in enumerate(Suit)}


def compare_value(rank: int) -> int:
    """Return the ordering value of ``rank``.

    Threes are the highest natural card, followed by twos and aces; the
    remaining ranks keep their natural order starting from four at zero.
    Jokers sit above everything else.
    """

    if rank == 3:
        return 13
    if rank == TWO:
        return 12
    if rank == ACE:
        return 11
    if rank == BLACK_JOKER:
        return 14
    if rank == RED_JOKER:
        return 15
    return rank - 4


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a physical card."""

    suit: Suit
    rank: int

    @property
    def code(self) -> str:
        """Unique identifier used on the wire, e.g. ``"H3"`` or ``"J16"``."""

        return f"{self.suit.value}{self.rank}"

    @property
    def value(self) -> int:
        return compare_value(self.rank)

    @property
    def is_joker(self) -> bool:
        return self.suit is Suit.JOKER

    def label(self) -> str:
        """Create a short human readable label."""

        if self.is_joker:
            return RANK_LABELS[self.rank]
        return f"{RANK_LABELS[self.rank]}{self.suit.value}"

    def __str__(self) -> str:
        return self.code


def card_from_code(code: str) -> Card:
    """Parse a card code such as ``"D14"`` back into a :class:`Card`."""

    if len(code) < 2:
        raise ValueError(f"invalid card code '{code}'")
    try:
        suit = Suit(code[0])
        rank = int(code[1:])
    except ValueError as exc:
        raise ValueError(f"invalid card code '{code}'") from exc
    if suit is Suit.JOKER:
        if rank not in (BLACK_JOKER, RED_JOKER):
            raise ValueError(f"invalid card code '{code}'")
    elif not LOWEST_RANK <= rank <= TWO:
        raise ValueError(f"invalid card code '{code}'")
    return Card(suit=suit, rank=rank)


def parse_cards(text: str) -> list[Card]:
    """Parse a whitespace separated list of card codes."""

    return [card_from_code(code) for code in text.split()]


def sort_key(card: Card) -> tuple[int, int]:
    return (-card.value, _SUIT_ORDER[card.suit])


def sort_cards(cards: Iterable[Card]) -> list[Card]:
    """Return ``cards`` strongest first; suit order breaks ties."""

    return sorted(cards, key=sort_key)


def iter_full_deck(include_jokers: bool = False) -> Iterator[Card]:
    """Yield all physical cards of a fresh deck in canonical order."""

    for rank in range(LOWEST_RANK, TWO + 1):
        for suit in Suit.standard():
            yield Card(suit=suit, rank=rank)
    if include_jokers:
        yield Card(suit=Suit.JOKER, rank=BLACK_JOKER)
        yield Card(suit=Suit.JOKER, rank=RED_JOKER)


def full_deck(include_jokers: bool = False) -> list[Card]:
    return list(iter_full_deck(include_jokers))


def shuffled_deck(rng: random.Random, include_jokers: bool = False) -> list[Card]:
    """Return a uniformly shuffled copy of the canonical deck."""

    deck = full_deck(include_jokers)
    # Fisher-Yates, spelled out so the permutation only depends on ``rng``.
    for idx in range(len(deck) - 1, 0, -1):
        swap = rng.randint(0, idx)
        deck[idx], deck[swap] = deck[swap], deck[idx]
    return deck


def format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.code for card in cards)
