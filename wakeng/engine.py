"""Validated player operations over a single room's game state."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from . import actions
from .cards import Card, shuffled_deck, sort_cards
from .events import EventBus, EventKind
from .rules import (
    MAX_BID,
    VALID_BIDS,
    ConfigError,
    LegalityError,
    PhaseError,
    Side,
    StateError,
    TurnError,
    analyze_hand,
    beats,
    heart_four_holder,
    is_forced_bid,
    lowest_heart_holder,
)
from .scoreboard import (
    PendingSettlement,
    SettlementEntry,
    SettlementLedger,
    base_deltas,
)
from .state import (
    SEAT_COUNT,
    GameConfig,
    GameState,
    Phase,
    TablePlay,
    deal_new_game,
)

__all__ = ["UndoRecord", "MaskedView", "GameEngine"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UndoRecord:
    """Everything needed to take back the most recent play."""

    seat: int
    played_cards: tuple[Card, ...]
    prev_last_move: TablePlay | None
    prev_pass_count: int
    prev_pile_length: int
    prev_moves_length: int


@dataclass(frozen=True, slots=True)
class MaskedView:
    """What a single seat is allowed to know about the table."""

    seat: int
    players: tuple[str, ...]
    round_number: int
    phase: Phase
    hand: tuple[Card, ...]
    hand_counts: tuple[int, ...]
    current_turn: int
    bidding_starter: int
    bid_score: int
    bids: tuple[int | None, ...]
    digger: int | None
    pass_count: int
    last_move: TablePlay | None
    hole: tuple[Card, ...]
    played: tuple[tuple[Card, ...], ...]
    winner: int | None
    winner_side: Side | None
    host_seat: int
    totals: tuple[int, ...]
    ledger: tuple[SettlementEntry, ...]
    pending: PendingSettlement | None
    can_undo: bool

    @property
    def is_my_turn(self) -> bool:
        return self.current_turn == self.seat and self.phase is not Phase.FINISHED


class GameEngine:
    """Owns one room's game and validates every operation before mutating it.

    Operations raise a :class:`~wakeng.rules.GameError` subclass and leave the
    state untouched when a request is rejected.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        rng: random.Random | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.events = events or EventBus()
        self.players: tuple[str, ...] = ()
        self.state: GameState | None = None
        self.ledger = SettlementLedger(num_players=SEAT_COUNT)
        self.last_winner: int | None = None
        self.round_number = 0
        self._undo: UndoRecord | None = None

    # ------------------------------------------------------------------
    # guards

    def _require_state(self) -> GameState:
        if self.state is None:
            raise StateError("no game has been started")
        return self.state

    def _require_phase(self, phase: Phase) -> GameState:
        state = self._require_state()
        if state.phase is not phase:
            raise PhaseError(f"expected phase {phase.value}, game is {state.phase.value}")
        return state

    @staticmethod
    def _check_seat(state: GameState, seat: int) -> None:
        if not 0 <= seat < state.seat_count:
            raise LegalityError(f"seat {seat} is not at the table")

    def _require_turn(self, phase: Phase, seat: int) -> GameState:
        state = self._require_phase(phase)
        self._check_seat(state, seat)
        if state.current_turn != seat:
            raise TurnError(f"it is seat {state.current_turn}'s turn, not seat {seat}'s")
        return state

    @property
    def undo_record(self) -> UndoRecord | None:
        return self._undo

    # ------------------------------------------------------------------
    # lifecycle

    def start_game(self, players: Sequence[str], *, deck: Sequence[Card] | None = None) -> GameState:
        """Deal a new hand for ``players``.

        Bidding starts with the previous hand's winner, or seat 0 for the first
        hand. ``deck`` fixes the deal order; otherwise the engine's RNG shuffles.
        """

        if len(players) != SEAT_COUNT:
            raise ConfigError(f"exactly {SEAT_COUNT} players are required, got {len(players)}")
        if self.state is not None and self.state.phase is not Phase.FINISHED:
            raise StateError("a game is already in progress")
        if self.ledger.pending is not None:
            raise StateError("the previous hand has not been settled")

        if deck is None:
            deck = shuffled_deck(self.rng, self.config.include_jokers)
        starter = self.last_winner if self.last_winner is not None else 0
        state = deal_new_game(self.config, deck, bidding_starter=starter)

        self.players = tuple(players)
        self.state = state
        self.round_number += 1
        self._undo = None
        logger.debug("round %d dealt, bidding starts at seat %d", self.round_number, starter)
        self.events.emit(
            EventKind.GAME_STARTED,
            None,
            round=self.round_number,
            players=list(self.players),
            bidding_starter=starter,
        )
        return state

    def reset(self) -> None:
        """Drop the current hand and any pending settlement, keeping the ledger."""

        self.state = None
        self._undo = None
        self.ledger.pending = None

    # ------------------------------------------------------------------
    # bidding

    def bid(self, seat: int, score: int) -> None:
        state = self._require_turn(Phase.BIDDING, seat)
        if score not in VALID_BIDS:
            raise LegalityError(f"bid must be one of {VALID_BIDS}, got {score}")

        forced = is_forced_bid(state.hands[seat])
        if not forced and score > 0 and score <= state.bid_score:
            raise LegalityError(f"bid must exceed the current score of {state.bid_score}")

        if forced:
            score = MAX_BID
        state.bids[seat] = score
        if score > state.bid_score:
            state.bid_score = score
            state.digger = seat
        self.events.emit(EventKind.BID, seat, score=score, forced=forced)
        logger.debug("seat %d bids %d%s", seat, score, " (forced)" if forced else "")

        if score == MAX_BID:
            self._resolve_bidding(state)
            return

        following = state.next_seat(seat)
        if following == state.bidding_starter:
            if state.digger is None:
                state.digger = lowest_heart_holder(state.hands, default=state.bidding_starter)
                state.bid_score = 1
            self._resolve_bidding(state)
        else:
            state.current_turn = following

    def _resolve_bidding(self, state: GameState) -> None:
        assert state.digger is not None
        state.phase = Phase.TAKING_HOLE
        state.current_turn = state.digger
        state.last_move = None
        state.pass_count = 0
        state.revealed_hole = list(state.hole)
        logger.debug("bidding resolved: digger=%d score=%d", state.digger, state.bid_score)
        self.events.emit(
            EventKind.HOLE_REVEALED,
            state.digger,
            hole=[card.code for card in state.revealed_hole],
            bid_score=state.bid_score,
        )

    def take_hole(self, seat: int) -> None:
        state = self._require_phase(Phase.TAKING_HOLE)
        self._check_seat(state, seat)
        if seat != state.digger:
            raise TurnError("only the digger may take the hole")

        taken = list(state.hole)
        state.hands[seat] = sort_cards(state.hands[seat] + taken)
        state.hole.clear()
        state.phase = Phase.PLAYING
        state.last_move = None
        state.pass_count = 0
        opener = heart_four_holder(state.hands)
        if opener is not None:
            state.current_turn = opener
        logger.debug("seat %d took %d hole cards; seat %d opens", seat, len(taken), state.current_turn)
        self.events.emit(
            EventKind.HOLE_TAKEN,
            seat,
            cards=[card.code for card in taken],
            opener=state.current_turn,
        )

    # ------------------------------------------------------------------
    # playing

    def play_cards(self, seat: int, codes: Sequence[str]) -> TablePlay:
        state = self._require_turn(Phase.PLAYING, seat)
        if not codes:
            raise LegalityError("a play needs at least one card")
        if len(set(codes)) != len(codes):
            raise LegalityError("a card was named more than once")

        by_code = {card.code: card for card in state.hands[seat]}
        missing = [code for code in codes if code not in by_code]
        if missing:
            raise LegalityError(f"cards not in hand: {', '.join(missing)}")
        cards = [by_code[code] for code in codes]

        pattern = analyze_hand(cards)
        if pattern is None:
            raise LegalityError("cards do not form a valid pattern")
        if actions.is_following(state, seat):
            assert state.last_move is not None
            if not beats(pattern, state.last_move.pattern):
                raise LegalityError("play does not beat the last move")

        record = UndoRecord(
            seat=seat,
            played_cards=tuple(cards),
            prev_last_move=state.last_move,
            prev_pass_count=state.pass_count,
            prev_pile_length=len(state.played[seat]),
            prev_moves_length=len(state.moves[seat]),
        )
        outcome = actions.apply_play(state, seat, cards, pattern)
        play = state.last_move
        assert play is not None
        self._undo = record
        self.events.emit(
            EventKind.PLAY,
            seat,
            cards=[card.code for card in cards],
            pattern=pattern.type.value,
            rank=pattern.rank,
            length=pattern.length,
        )
        logger.debug("seat %d plays %s (%s)", seat, " ".join(codes), pattern.type.value)

        if outcome is actions.PlayOutcome.FINISHED:
            self._finish(state)
        elif outcome is actions.PlayOutcome.MAX_PLAY:
            self.events.emit(EventKind.MAX_PLAY, seat, cards=[card.code for card in cards])
        return play

    def _finish(self, state: GameState) -> None:
        assert state.winner is not None and state.winner_side is not None
        assert state.digger is not None
        self._undo = None
        self.last_winner = state.winner
        deltas = base_deltas(state.seat_count, state.digger, state.bid_score, state.winner_side)
        self.ledger.open(
            PendingSettlement(
                round_number=self.round_number,
                bid_score=state.bid_score,
                digger=state.digger,
                winner=state.winner,
                winner_side=state.winner_side,
                deltas=deltas,
            )
        )
        logger.info(
            "round %d over: seat %d wins for the %s side",
            self.round_number,
            state.winner,
            state.winner_side.value,
        )
        self.events.emit(
            EventKind.GAME_OVER,
            state.winner,
            winner_side=state.winner_side.value,
            base_deltas=list(deltas),
        )

    def pass_turn(self, seat: int) -> bool:
        """Pass for ``seat``; return ``True`` when the pass closed the trick."""

        state = self._require_turn(Phase.PLAYING, seat)
        if not actions.is_following(state, seat):
            raise LegalityError("cannot pass with free play")

        owner = state.last_move.seat if state.last_move is not None else seat
        closed = actions.apply_pass(state, seat)
        self._undo = None
        self.events.emit(EventKind.PASS, seat, trick_closed=closed, next_turn=state.current_turn)
        if closed:
            logger.debug("trick closed, seat %d has free play", owner)
        return closed

    def undo(self, seat: int) -> None:
        """Take back ``seat``'s most recent play while nobody has acted on it."""

        state = self._require_phase(Phase.PLAYING)
        self._check_seat(state, seat)
        record = self._undo
        last = state.last_move
        if record is None or record.seat != seat or last is None or last.seat != seat:
            raise StateError("no undoable move")
        if state.pass_count != 0:
            raise StateError("cannot undo after another seat acted")

        state.hands[seat] = sort_cards(state.hands[seat] + list(record.played_cards))
        del state.played[seat][record.prev_pile_length :]
        del state.moves[seat][record.prev_moves_length :]
        state.last_move = record.prev_last_move
        state.pass_count = record.prev_pass_count
        state.current_turn = seat
        self._undo = None
        logger.debug("seat %d undid %d cards", seat, len(record.played_cards))
        self.events.emit(
            EventKind.UNDO, seat, cards=[card.code for card in record.played_cards]
        )

    # ------------------------------------------------------------------
    # settlement and views

    def set_settlement_multiplier(self, authority_seat: int, multiplier: int) -> SettlementEntry:
        """Apply the host's multiplier to the pending settlement, exactly once."""

        if authority_seat != self.config.host_seat:
            raise TurnError("only the host may set the settlement multiplier")
        entry = self.ledger.apply_multiplier(multiplier)
        self.events.emit(
            EventKind.SETTLEMENT_APPLIED,
            authority_seat,
            multiplier=multiplier,
            deltas=list(entry.deltas),
            totals=self.ledger.totals(),
        )
        return entry

    def masked_view(self, seat: int) -> MaskedView:
        state = self._require_state()
        self._check_seat(state, seat)
        record = self._undo
        last = state.last_move
        can_undo = (
            state.phase is Phase.PLAYING
            and record is not None
            and record.seat == seat
            and last is not None
            and last.seat == seat
            and state.pass_count == 0
        )
        return MaskedView(
            seat=seat,
            players=self.players,
            round_number=self.round_number,
            phase=state.phase,
            hand=tuple(state.hands[seat]),
            hand_counts=tuple(state.hand_counts()),
            current_turn=state.current_turn,
            bidding_starter=state.bidding_starter,
            bid_score=state.bid_score,
            bids=tuple(state.bids),
            digger=state.digger,
            pass_count=state.pass_count,
            last_move=last,
            hole=tuple(state.revealed_hole),
            played=tuple(tuple(pile) for pile in state.played),
            winner=state.winner,
            winner_side=state.winner_side,
            host_seat=self.config.host_seat,
            totals=tuple(self.ledger.totals()),
            ledger=tuple(self.ledger.entries),
            pending=self.ledger.pending,
            can_undo=can_undo,
        )

    def snapshot(self) -> GameState:
        """Deep copy of the live state for work outside the room lock."""

        return self._require_state().clone()
