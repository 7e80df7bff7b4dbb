"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Sequence

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import RANK_LABELS, Card, Suit
from ..engine import MaskedView
from .views import TableView

_SUIT_SYMBOLS = {
    Suit.SPADES: ("♠", "cyan"),
    Suit.HEARTS: ("♥", "red"),
    Suit.DIAMONDS: ("♦", "magenta"),
    Suit.CLUBS: ("♣", "green"),
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    if card.is_joker:
        color = "red" if card.rank == 17 else "white"
        return f"[bold {color}]{RANK_LABELS[card.rank]}[/bold {color}]"
    symbol, color = _SUIT_SYMBOLS[card.suit]
    return f"[{color}]{RANK_LABELS[card.rank]}{symbol}[/{color}]"


def format_cards(cards: Sequence[Card]) -> str:
    if not cards:
        return "—"
    return " ".join(format_card(card) for card in cards)


def render_view(
    view: MaskedView,
    roles: Sequence[str],
    *,
    title: str = "Dig the Hole",
) -> RenderableType:
    """Return a Rich panel describing the table as ``view.seat`` sees it."""

    table_view = TableView(view=view, roles=roles, card_formatter=format_card)
    return Panel(table_view.render(), title=title, padding=(0, 1), border_style="cyan")
