"""Composable view primitives for the dig-the-hole CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card
from ..engine import MaskedView
from ..state import Phase


@dataclass(slots=True)
class TableView:
    """Renderable summarising a masked view of the table."""

    view: MaskedView
    roles: Sequence[str]
    card_formatter: Callable[[Card], str]

    def _cards(self, cards: Sequence[Card]) -> str:
        if not cards:
            return "—"
        return " ".join(self.card_formatter(card) for card in cards)

    def _status(self, seat: int) -> str:
        view = self.view
        if view.winner == seat:
            return "[bold green]Winner[/bold green]"
        parts: list[str] = []
        if view.digger == seat and view.phase is not Phase.BIDDING:
            parts.append("[bold red]Digger[/bold red]")
        if view.last_move is not None and view.last_move.seat == seat:
            parts.append("Leads")
        return ", ".join(parts) or "—"

    def _metadata_panel(self) -> Panel:
        view = self.view
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Round[/cyan]: {view.round_number}")
        grid.add_row(f"[cyan]Phase[/cyan]: {view.phase.value.replace('_', ' ').title()}")
        grid.add_row(f"[cyan]Bid[/cyan]: {view.bid_score}")
        if view.last_move is not None:
            last = view.last_move
            grid.add_row(
                f"[cyan]Last play[/cyan]: P{last.seat} {self._cards(last.cards)} "
                f"({last.pattern.type.value.replace('_', ' ')})"
            )
        else:
            grid.add_row("[cyan]Last play[/cyan]: free play")
        if view.hole:
            grid.add_row(f"[cyan]Hole[/cyan]: {self._cards(view.hole)}")
        grid.add_row(f"[cyan]Passes[/cyan]: {view.pass_count}")
        return Panel(grid, title="Table State", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        view = self.view
        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Player", justify="left", style="bold")
        table.add_column("Role", justify="left")
        table.add_column("Hand", justify="left")
        table.add_column("Bid", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Status", justify="left")

        for seat, count in enumerate(view.hand_counts):
            role = self.roles[seat] if seat < len(self.roles) else "AI"
            if seat == view.seat:
                hand = self._cards(view.hand)
            else:
                hand = f"{count} cards"
            bid = view.bids[seat]
            name = view.players[seat] if seat < len(view.players) else f"P{seat}"
            if seat == view.current_turn and view.phase is not Phase.FINISHED:
                name = f"[bold yellow]{name}[/bold yellow]"
            table.add_row(
                name,
                role,
                hand,
                "—" if bid is None else str(bid),
                str(view.totals[seat]),
                self._status(seat),
            )

        return Group(table, self._metadata_panel())
