from __future__ import annotations

from wakeng import actions
from wakeng.cards import parse_cards, sort_cards
from wakeng.rules import HandPattern, PatternType, Side, analyze_hand
from wakeng.state import GameConfig, GameState, Phase, TablePlay


def _make_playing_state(
    hands: list[str],
    *,
    current_turn: int = 0,
    last_move: str | None = None,
    last_seat: int = 0,
    digger: int = 0,
) -> GameState:
    last = None
    if last_move is not None:
        cards = tuple(parse_cards(last_move))
        pattern = analyze_hand(cards)
        assert pattern is not None
        last = TablePlay(seat=last_seat, cards=cards, pattern=pattern)
    return GameState(
        config=GameConfig(),
        hands=[sort_cards(parse_cards(hand)) for hand in hands],
        phase=Phase.PLAYING,
        current_turn=current_turn,
        digger=digger,
        bid_score=1,
        last_move=last,
    )


def test_generate_plays_lists_each_pattern_once() -> None:
    hand = parse_cards("H4 D4 H5 D5 H6 D6 S7")
    keys = [actions.move_key(move) for move in actions.generate_plays(hand)]

    assert len(keys) == len(set(keys))
    assert set(keys) == {
        (4,),
        (5,),
        (6,),
        (7,),
        (4, 4),
        (5, 5),
        (6, 6),
        (4, 5, 6),
        (4, 5, 6, 7),
        (5, 6, 7),
        (4, 4, 5, 5, 6, 6),
    }
    for move in actions.generate_plays(hand):
        assert analyze_hand(move) is not None


def test_generate_plays_includes_groups_up_to_quads() -> None:
    hand = parse_cards("H3 D3 C3 S3 H15")
    keys = {actions.move_key(move) for move in actions.generate_plays(hand)}

    assert keys == {(3,), (3, 3), (3, 3, 3), (3, 3, 3, 3), (15,)}


def test_legal_moves_with_free_play_excludes_pass() -> None:
    state = _make_playing_state(["H4 H9", "D4", "C4", "S4"])
    moves = actions.legal_moves(state, 0)

    assert actions.PASS not in moves
    assert {actions.move_key(move) for move in moves} == {(4,), (9,)}
    assert actions.legal_moves(state, 1) == []


def test_legal_moves_when_following_only_beats_or_passes() -> None:
    state = _make_playing_state(
        ["H9", "C4 S4 C6 S6 C3 S3 H10", "D9", "S9"],
        current_turn=1,
        last_move="H5 D5",
        last_seat=0,
    )
    keys = {actions.move_key(move) for move in actions.legal_moves(state, 1)}

    assert keys == {(6, 6), (3, 3), ()}


def test_apply_play_max_play_keeps_turn_and_finishing_ends_hand() -> None:
    state = _make_playing_state(["H3 H9", "D4", "C4", "S4"], digger=0)

    outcome = actions.apply_play(state, 0, parse_cards("H3"))
    assert outcome is actions.PlayOutcome.MAX_PLAY
    assert state.current_turn == 0
    assert state.last_move is not None and state.last_move.seat == 0

    outcome = actions.apply_play(state, 0, parse_cards("H9"))
    assert outcome is actions.PlayOutcome.FINISHED
    assert state.phase is Phase.FINISHED
    assert state.winner == 0
    assert state.winner_side is Side.DIGGER
    assert [card.code for card in state.played[0]] == ["H3", "H9"]
    assert len(state.moves[0]) == 2


def test_apply_play_advances_turn() -> None:
    state = _make_playing_state(["H5 H9", "D4", "C4", "S4"], digger=2)

    outcome = actions.apply_play(state, 0, parse_cards("H5"))

    assert outcome is actions.PlayOutcome.NEXT
    assert state.current_turn == 1
    assert state.last_move == TablePlay(0, tuple(parse_cards("H5")), HandPattern(PatternType.SINGLE, 5, 1))


def test_three_passes_close_the_trick() -> None:
    state = _make_playing_state(
        ["H9", "D4", "C4", "S4"], current_turn=1, last_move="H5", last_seat=0
    )

    assert not actions.apply_pass(state, 1)
    assert not actions.apply_pass(state, 2)
    assert state.pass_count == 2
    assert state.current_turn == 3
    assert actions.apply_pass(state, 3)
    assert state.current_turn == 0
    assert state.last_move is None
    assert state.pass_count == 0


def test_apply_move_treats_empty_move_as_pass() -> None:
    state = _make_playing_state(
        ["H9", "D4", "C4", "S4"], current_turn=1, last_move="H5", last_seat=0
    )
    actions.apply_move(state, 1, actions.PASS)

    assert state.pass_count == 1
    assert state.current_turn == 2
