"""Rule utilities, pattern grammar and exceptions for dig-the-hole."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Final, Sequence

from .cards import RED_JOKER, Card, Suit, compare_value

__all__ = [
    "PatternType",
    "HandPattern",
    "Side",
    "GameError",
    "PhaseError",
    "TurnError",
    "LegalityError",
    "StateError",
    "ConfigError",
    "SEQUENCE_LOW",
    "SEQUENCE_HIGH",
    "VALID_BIDS",
    "MAX_BID",
    "analyze_hand",
    "beats",
    "can_beat",
    "is_max_play",
    "can_any_beat",
    "is_forced_bid",
    "lowest_heart_holder",
    "heart_four_holder",
]

SEQUENCE_LOW: Final[int] = 4
SEQUENCE_HIGH: Final[int] = 13
VALID_BIDS: Final[tuple[int, ...]] = (0, 1, 2, 3, 4)
MAX_BID: Final[int] = 4
TOP_RANK: Final[int] = 3


class PatternType(str, Enum):
    """Every legal shape a play can take."""

    SINGLE = "single"
    PAIR = "pair"
    TRIPLET = "triplet"
    QUAD = "quad"
    STRAIGHT = "straight"
    CONSECUTIVE_PAIRS = "consecutive_pairs"
    CONSECUTIVE_TRIPLETS = "consecutive_triplets"

    @property
    def is_sequence(self) -> bool:
        return self in _SEQUENCE_TYPES

    @property
    def group_size(self) -> int:
        """Number of equal-rank cards per step of the pattern."""

        return _GROUP_SIZES[self]


_SEQUENCE_TYPES = frozenset(
    {PatternType.STRAIGHT, PatternType.CONSECUTIVE_PAIRS, PatternType.CONSECUTIVE_TRIPLETS}
)
_GROUP_SIZES = {
    PatternType.SINGLE: 1,
    PatternType.PAIR: 2,
    PatternType.TRIPLET: 3,
    PatternType.QUAD: 4,
    PatternType.STRAIGHT: 1,
    PatternType.CONSECUTIVE_PAIRS: 2,
    PatternType.CONSECUTIVE_TRIPLETS: 3,
}


@dataclass(frozen=True, slots=True)
class HandPattern:
    """Classification of a set of cards.

    ``rank`` is the natural rank of the pattern-defining card: the shared rank
    for groups, the top rank for sequences. ``length`` is the card count for
    groups and straights and the number of steps for consecutive pairs and
    triplets.
    """

    type: PatternType
    rank: int
    length: int

    @property
    def value(self) -> int:
        return compare_value(self.rank)


class Side(str, Enum):
    """The two teams of a hand."""

    DIGGER = "digger"
    OTHERS = "others"


class GameError(RuntimeError):
    """Base class for every rejected player operation."""


class PhaseError(GameError):
    """Raised when an operation is not valid in the current phase."""


class TurnError(GameError):
    """Raised when a seat acts out of turn."""


class LegalityError(GameError):
    """Raised when submitted cards or values break the rules."""


class StateError(GameError):
    """Raised when the game is not in a state that permits the request."""


class ConfigError(GameError):
    """Raised for unusable seat counts or deck configurations."""


def _is_run(ranks: Sequence[int], group: int) -> bool:
    """Return ``True`` when sorted ``ranks`` form consecutive groups of ``group`` cards."""

    if ranks[0] < SEQUENCE_LOW or ranks[-1] > SEQUENCE_HIGH:
        return False
    for start in range(0, len(ranks), group):
        step = ranks[start : start + group]
        if step[0] != step[-1]:
            return False
        if start > 0 and step[0] != ranks[start - group] + 1:
            return False
    return True


def analyze_hand(cards: Sequence[Card]) -> HandPattern | None:
    """Classify ``cards`` or return ``None`` when they form no legal pattern."""

    if not cards:
        return None
    ranks = sorted(card.rank for card in cards)
    size = len(ranks)

    if size == 4 and ranks[0] == ranks[3]:
        return HandPattern(PatternType.QUAD, ranks[0], 4)
    if size == 1:
        return HandPattern(PatternType.SINGLE, ranks[0], 1)
    if size == 2 and ranks[0] == ranks[1]:
        return HandPattern(PatternType.PAIR, ranks[0], 2)
    if size == 3 and ranks[0] == ranks[2]:
        return HandPattern(PatternType.TRIPLET, ranks[0], 3)

    if size >= 3 and _is_run(ranks, 1):
        return HandPattern(PatternType.STRAIGHT, ranks[-1], size)
    if size >= 6 and size % 2 == 0 and _is_run(ranks, 2):
        return HandPattern(PatternType.CONSECUTIVE_PAIRS, ranks[-1], size // 2)
    if size >= 6 and size % 3 == 0 and _is_run(ranks, 3):
        return HandPattern(PatternType.CONSECUTIVE_TRIPLETS, ranks[-1], size // 3)
    return None


def beats(current: HandPattern, last: HandPattern) -> bool:
    """Pattern-level beat check: same type, same length, higher value."""

    if current.type is not last.type or current.length != last.length:
        return False
    return current.value > last.value


def can_beat(current: Sequence[Card], last: Sequence[Card]) -> bool:
    """Return ``True`` when the cards in ``current`` beat the cards in ``last``."""

    current_pattern = analyze_hand(current)
    last_pattern = analyze_hand(last)
    if current_pattern is None or last_pattern is None:
        return False
    return beats(current_pattern, last_pattern)


def is_max_play(pattern: HandPattern, include_jokers: bool = False) -> bool:
    """Return ``True`` when nothing in the deck can beat ``pattern``.

    Groups top out at the threes, sequences at the king. With jokers in the
    deck a single three can still be beaten, so only the red joker is a
    ceiling single.
    """

    if pattern.type is PatternType.SINGLE:
        ceiling = compare_value(RED_JOKER) if include_jokers else compare_value(TOP_RANK)
        return pattern.value >= ceiling
    if pattern.type.is_sequence:
        return pattern.rank == SEQUENCE_HIGH
    return pattern.rank == TOP_RANK


def can_any_beat(hand: Sequence[Card], pattern: HandPattern) -> bool:
    """Return ``True`` when some combination of ``hand`` beats ``pattern``."""

    counts = Counter(card.rank for card in hand)
    if pattern.type.is_sequence:
        need = pattern.type.group_size
        span = pattern.length
        for top in range(pattern.rank + 1, SEQUENCE_HIGH + 1):
            bottom = top - span + 1
            if bottom < SEQUENCE_LOW:
                continue
            if all(counts[rank] >= need for rank in range(bottom, top + 1)):
                return True
        return False

    need = pattern.type.group_size
    return any(
        count >= need and compare_value(rank) > pattern.value for rank, count in counts.items()
    )


def is_forced_bid(hand: Sequence[Card]) -> bool:
    """Three threes, or two threes with the heart four, force a maximum bid."""

    threes = sum(1 for card in hand if card.rank == TOP_RANK)
    if threes >= 3:
        return True
    return threes >= 2 and any(_is_heart_four(card) for card in hand)


def _is_heart_four(card: Card) -> bool:
    return card.suit is Suit.HEARTS and card.rank == 4


def lowest_heart_holder(hands: Sequence[Sequence[Card]], default: int = 0) -> int:
    """Return the seat holding the lowest-valued heart in hand."""

    best_seat = default
    best_value: int | None = None
    for seat, hand in enumerate(hands):
        for card in hand:
            if card.suit is not Suit.HEARTS:
                continue
            if best_value is None or card.value < best_value:
                best_value = card.value
                best_seat = seat
    return best_seat


def heart_four_holder(hands: Sequence[Sequence[Card]]) -> int | None:
    for seat, hand in enumerate(hands):
        if any(_is_heart_four(card) for card in hand):
            return seat
    return None
