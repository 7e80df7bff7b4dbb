"""Typer entry-point wiring for the dig-the-hole CLI."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .. import actions, benchmark, evaluation
from ..agent import Decision, DecisionKind, Difficulty, apply_decision, decide
from ..engine import GameEngine
from ..ismcts.search import SearchConfig
from ..rules import GameError, can_any_beat
from ..scoreboard import ALLOWED_MULTIPLIERS
from ..state import SEAT_COUNT, GameConfig, Phase
from .render import format_cards, render_view


@dataclass(slots=True)
class PlayerContext:
    """Runtime metadata describing each seated player."""

    label: str
    role: str  # "Human" or "AI"


app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def parse_command(text: str) -> tuple[str, list[str]]:
    """Split a line of human input into a command and its card codes."""

    words = text.strip().split()
    if not words:
        return "empty", []
    head = words[0].lower()
    if head in {"pass", "p"}:
        return "pass", []
    if head in {"undo", "u"}:
        return "undo", []
    if head in {"hint", "h", "?"}:
        return "hint", []
    return "play", [word.upper() for word in words]


def _actor_label(ctx: PlayerContext) -> str:
    return "[yellow]You[/yellow]" if ctx.role == "Human" else f"[cyan]{ctx.label}[/cyan]"


def _describe_decision(decision: Decision, ctx: PlayerContext) -> str:
    actor = _actor_label(ctx)
    if decision.kind is DecisionKind.BID:
        return f"{actor} bids {decision.score}" if decision.score else f"{actor} passes the bid"
    if decision.kind is DecisionKind.TAKE_HOLE:
        return f"{actor} takes the hole"
    if decision.kind is DecisionKind.PASS:
        return f"{actor} passes"
    return f"{actor} plays {format_cards(decision.cards)}"


def _hint(engine: GameEngine, seat: int) -> str:
    state = engine.state
    assert state is not None
    last = state.last_move
    if last is not None and last.seat != seat and not can_any_beat(state.hands[seat], last.pattern):
        return "Nothing in your hand beats the last play; you must pass."
    moves = actions.legal_moves(state, seat)
    move = evaluation.choose_heuristic_play(state, seat, moves)
    if not move:
        return "Consider passing."
    return f"Try {format_cards(move)}"


def _human_bid(engine: GameEngine, seat: int) -> None:
    while True:
        raw = typer.prompt("Your bid (0 passes, 1-4)", default="0")
        try:
            engine.bid(seat, int(raw))
            return
        except ValueError:
            console.print("[red]Enter a number between 0 and 4.[/red]")
        except GameError as exc:
            console.print(f"[red]{exc}[/red]")


def _human_play(engine: GameEngine, seat: int) -> None:
    while True:
        raw = typer.prompt("Cards to play (codes like H5 D5), 'pass', 'undo' or 'hint'")
        command, codes = parse_command(raw)
        try:
            if command == "pass":
                engine.pass_turn(seat)
                return
            if command == "undo":
                engine.undo(seat)
                console.print("[magenta]Play taken back.[/magenta]")
                return
            if command == "hint":
                console.print(_hint(engine, seat))
                continue
            if command == "play":
                engine.play_cards(seat, codes)
                return
        except GameError as exc:
            console.print(f"[red]{exc}[/red]")


def _settle(engine: GameEngine, players_ctx: Sequence[PlayerContext]) -> None:
    host = engine.config.host_seat
    if players_ctx[host].role == "Human":
        while True:
            raw = typer.prompt(
                f"Settlement multiplier {list(ALLOWED_MULTIPLIERS)}", default="1"
            )
            try:
                engine.set_settlement_multiplier(host, int(raw))
                break
            except ValueError:
                console.print("[red]Enter one of the allowed multipliers.[/red]")
            except GameError as exc:
                console.print(f"[red]{exc}[/red]")
    else:
        engine.set_settlement_multiplier(host, 1)


def _render_round_summary(engine: GameEngine, players_ctx: Sequence[PlayerContext]) -> None:
    entry = engine.ledger.entries[-1]
    table = Table(title=f"Round {entry.round_number} Summary", box=box.SIMPLE_HEAVY)
    table.add_column("Player", justify="left")
    table.add_column("Role", justify="left")
    table.add_column("Delta", justify="right")
    table.add_column("Total", justify="right")
    totals = engine.ledger.totals()
    for seat, ctx in enumerate(players_ctx):
        role = "Digger" if seat == entry.digger else "Defender"
        label = ctx.label
        if seat == entry.winner:
            label = f"[bold green]{label}[/bold green]"
        table.add_row(label, role, f"{entry.deltas[seat]:+d}", str(totals[seat]))
    console.print(table)
    console.print(
        f"[cyan]Bid {entry.bid_score} x{entry.multiplier}, "
        f"{entry.winner_side.value} side wins.[/cyan]"
    )


def _play_round(
    engine: GameEngine,
    players_ctx: Sequence[PlayerContext],
    human_seat: int | None,
    difficulty: Difficulty,
    rng: random.Random,
    search_config: SearchConfig | None,
) -> None:
    engine.start_game([ctx.label for ctx in players_ctx])
    roles = [ctx.role for ctx in players_ctx]
    viewer = human_seat if human_seat is not None else 0
    while True:
        state = engine.state
        assert state is not None
        if state.phase is Phase.FINISHED:
            break
        seat = state.digger if state.phase is Phase.TAKING_HOLE else state.current_turn
        assert seat is not None
        if seat == human_seat:
            console.print(render_view(engine.masked_view(seat), roles))
            if state.phase is Phase.BIDDING:
                _human_bid(engine, seat)
            elif state.phase is Phase.TAKING_HOLE:
                console.print(f"You take the hole: {format_cards(state.hole)}")
                engine.take_hole(seat)
            else:
                _human_play(engine, seat)
            continue

        decision = decide(engine.snapshot(), seat, difficulty, rng, search_config=search_config)
        apply_decision(engine, decision)
        console.print(_describe_decision(decision, players_ctx[seat]))

    console.print(render_view(engine.masked_view(viewer), roles, title="Final Table"))
    _settle(engine, players_ctx)
    _render_round_summary(engine, players_ctx)


@app.command()
def play(
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    seat: int = typer.Option(0, min=0, max=SEAT_COUNT - 1, help="Seat controlled by the human player."),
    spectate: bool = typer.Option(False, "--spectate", help="Let the AI play every seat."),
    difficulty: Difficulty = typer.Option(Difficulty.NORMAL, help="Strength of the AI seats."),
    rounds: int = typer.Option(1, min=1, help="Number of hands to play."),
    hole_size: int = typer.Option(0, help="Hole cards dealt to nobody (0, 4 or 6)."),
    jokers: bool = typer.Option(False, "--jokers/--no-jokers", help="Add both jokers to the deck."),
    iterations: int | None = typer.Option(None, min=1, help="Override search iterations per AI move."),
    verbose: bool = typer.Option(False, "--verbose", help="Log engine and search activity."),
) -> None:
    """Play dig-the-hole against AI seats in the terminal."""

    _configure_logging(verbose)
    human_seat = None if spectate else seat
    try:
        config = GameConfig(hole_size=hole_size, include_jokers=jokers, host_seat=human_seat or 0)
    except GameError as exc:
        raise typer.BadParameter(str(exc)) from exc

    rng = random.Random(seed)
    engine = GameEngine(config, rng=random.Random(rng.getrandbits(64)))
    search_config = SearchConfig(iterations=iterations, time_budget=None) if iterations else None
    players_ctx = [
        PlayerContext(label="You" if idx == human_seat else f"AI{idx}", role="Human" if idx == human_seat else "AI")
        for idx in range(SEAT_COUNT)
    ]

    for _ in range(rounds):
        _play_round(engine, players_ctx, human_seat, difficulty, rng, search_config)


@app.command("benchmark")
def benchmark_cli(
    rounds: int = typer.Option(10, min=1, help="Number of self-play hands."),
    difficulty: list[Difficulty] = typer.Option(
        [Difficulty.NORMAL],
        help="Difficulty per seat; repeat for each seat or give one for all seats.",
    ),
    seed: int = typer.Option(123, help="Random seed for the benchmark."),
    iterations: int | None = typer.Option(None, min=1, help="Override search iterations per AI move."),
    verbose: bool = typer.Option(False, "--verbose", help="Log engine and search activity."),
) -> None:
    """Run an AI self-play benchmark."""

    _configure_logging(verbose)
    if len(difficulty) == 1:
        difficulties = list(difficulty) * SEAT_COUNT
    elif len(difficulty) == SEAT_COUNT:
        difficulties = list(difficulty)
    else:
        raise typer.BadParameter(f"give one difficulty or exactly {SEAT_COUNT}")

    search_config = SearchConfig(iterations=iterations, time_budget=None) if iterations else None
    report = benchmark.run_self_play(
        rounds, difficulties, seed=seed, search_config=search_config
    )

    table = Table(title="Self-Play Benchmark", box=box.SIMPLE_HEAVY)
    table.add_column("Seat", justify="center")
    table.add_column("Difficulty", justify="left")
    table.add_column("Wins", justify="right")
    table.add_column("Digger", justify="right")
    table.add_column("Digger wins", justify="right")
    table.add_column("Total", justify="right")
    for entry in report.seats:
        table.add_row(
            f"P{entry.seat}",
            entry.difficulty.value,
            str(entry.wins),
            str(entry.digger_rounds),
            str(entry.digger_wins),
            str(entry.total),
        )

    console.print(table)
    console.print(
        f"[cyan]{report.rounds} hand(s), {report.actions} action(s), "
        f"digger win rate {report.digger_win_rate:.0%}.[/cyan]"
    )


def main() -> None:
    """Entry-point for the ``wakeng`` console script."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
