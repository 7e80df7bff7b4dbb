"""Core game state data structures for dig-the-hole."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final, List, Sequence

from .cards import Card, full_deck, sort_cards
from .rules import ConfigError, HandPattern, Side

SEAT_COUNT: Final[int] = 4
HOLE_SIZES: Final[tuple[int, ...]] = (0, 4, 6)


class Phase(str, Enum):
    """Phases of a single hand."""

    BIDDING = "bidding"
    TAKING_HOLE = "taking_hole"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Deck and table configuration for a round."""

    hole_size: int = 0
    include_jokers: bool = False
    host_seat: int = 0

    def __post_init__(self) -> None:
        if self.hole_size not in HOLE_SIZES:
            raise ConfigError(f"hole size must be one of {HOLE_SIZES}, got {self.hole_size}")
        if not 0 <= self.host_seat < SEAT_COUNT:
            raise ConfigError(f"host seat {self.host_seat} is not at the table")
        if (self.deck_size - self.hole_size) % SEAT_COUNT:
            raise ConfigError(
                f"{self.deck_size} cards minus a hole of {self.hole_size} "
                f"cannot be split between {SEAT_COUNT} seats"
            )

    @property
    def seat_count(self) -> int:
        return SEAT_COUNT

    @property
    def deck_size(self) -> int:
        return 54 if self.include_jokers else 52

    @property
    def hand_size(self) -> int:
        return (self.deck_size - self.hole_size) // SEAT_COUNT


@dataclass(frozen=True, slots=True)
class TablePlay:
    """A play as it sits on the table and in the per-seat history."""

    seat: int
    cards: tuple[Card, ...]
    pattern: HandPattern


@dataclass(slots=True)
class GameState:
    """Mutable state of one hand, shared by the engine and the search."""

    config: GameConfig
    hands: List[List[Card]]
    hole: List[Card] = field(default_factory=list)
    phase: Phase = Phase.BIDDING
    played: List[List[Card]] = field(default_factory=list)
    moves: List[List[TablePlay]] = field(default_factory=list)
    current_turn: int = 0
    bidding_starter: int = 0
    bid_score: int = 0
    digger: int | None = None
    bids: List[int | None] = field(default_factory=list)
    pass_count: int = 0
    last_move: TablePlay | None = None
    revealed_hole: List[Card] = field(default_factory=list)
    winner: int | None = None
    winner_side: Side | None = None

    def __post_init__(self) -> None:
        seats = len(self.hands)
        if not self.played:
            self.played = [[] for _ in range(seats)]
        if not self.moves:
            self.moves = [[] for _ in range(seats)]
        if not self.bids:
            self.bids = [None for _ in range(seats)]

    @property
    def seat_count(self) -> int:
        return len(self.hands)

    def next_seat(self, seat: int) -> int:
        return (seat + 1) % self.seat_count

    def hand_counts(self) -> list[int]:
        return [len(hand) for hand in self.hands]

    def clone(self) -> "GameState":
        """Return an independent copy; cards and plays are immutable and shared."""

        return GameState(
            config=self.config,
            hands=[list(hand) for hand in self.hands],
            hole=list(self.hole),
            phase=self.phase,
            played=[list(pile) for pile in self.played],
            moves=[list(history) for history in self.moves],
            current_turn=self.current_turn,
            bidding_starter=self.bidding_starter,
            bid_score=self.bid_score,
            digger=self.digger,
            bids=list(self.bids),
            pass_count=self.pass_count,
            last_move=self.last_move,
            revealed_hole=list(self.revealed_hole),
            winner=self.winner,
            winner_side=self.winner_side,
        )

    def all_cards(self) -> list[Card]:
        """Every card in every zone: hands, hole and played piles."""

        cards: list[Card] = []
        for hand in self.hands:
            cards.extend(hand)
        cards.extend(self.hole)
        for pile in self.played:
            cards.extend(pile)
        return cards


def deal_hands(
    deck: Sequence[Card], seat_count: int, hole_size: int
) -> tuple[list[list[Card]], list[Card]]:
    """Split ``deck`` into ``seat_count`` sorted hands and a hole.

    Each seat receives a contiguous block of the deck; the hole is the tail.
    """

    if seat_count <= 0:
        raise ConfigError("at least one seat is required")
    dealt = len(deck) - hole_size
    if hole_size < 0 or dealt < 0 or dealt % seat_count:
        raise ConfigError(
            f"cannot split {len(deck)} cards into {seat_count} hands and a hole of {hole_size}"
        )
    hand_size = dealt // seat_count
    hands = [
        sort_cards(deck[seat * hand_size : (seat + 1) * hand_size]) for seat in range(seat_count)
    ]
    hole = list(deck[dealt:])
    return hands, hole


def deal_new_game(
    config: GameConfig, deck: Sequence[Card], bidding_starter: int = 0
) -> GameState:
    """Deal a fresh hand returning a ``GameState`` in the bidding phase."""

    if len(deck) != config.deck_size or len(set(deck)) != len(deck):
        raise ConfigError(f"expected {config.deck_size} distinct cards, got {len(deck)}")
    hands, hole = deal_hands(deck, config.seat_count, config.hole_size)
    return GameState(
        config=config,
        hands=hands,
        hole=hole,
        phase=Phase.BIDDING,
        current_turn=bidding_starter,
        bidding_starter=bidding_starter,
    )


def cards_conserved(state: GameState) -> bool:
    """Return ``True`` when the zones of ``state`` hold exactly one full deck."""

    cards = state.all_cards()
    if len(cards) != state.config.deck_size or len(set(cards)) != len(cards):
        return False
    return set(cards) == set(full_deck(state.config.include_jokers))
