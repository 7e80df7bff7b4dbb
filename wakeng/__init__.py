"""Top-level package for the dig-the-hole game engine."""

from . import actions, cards, engine, rules, scoreboard, state

__all__ = [
    "actions",
    "cards",
    "engine",
    "rules",
    "scoreboard",
    "state",
]
