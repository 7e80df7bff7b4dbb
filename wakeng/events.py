"""Notifications emitted by the engine for a transport layer to fan out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Mapping

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    GAME_STARTED = "game_started"
    BID = "bid"
    HOLE_REVEALED = "hole_revealed"
    HOLE_TAKEN = "hole_taken"
    PLAY = "play"
    PASS = "pass"
    MAX_PLAY = "max_play"
    GAME_OVER = "game_over"
    UNDO = "undo"
    SETTLEMENT_APPLIED = "settlement_multiplier_applied"


@dataclass(frozen=True, slots=True)
class GameEvent:
    """A single notification; ``seq`` increases by one per emitted event."""

    seq: int
    kind: EventKind
    seat: int | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)


Listener = Callable[[GameEvent], None]


@dataclass(slots=True)
class EventBus:
    """Synchronous fan-out of events to subscribed listeners."""

    listeners: List[Listener] = field(default_factory=list)
    history: List[GameEvent] = field(default_factory=list)
    next_seq: int = 1

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self.listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return _unsubscribe

    def emit(self, kind: EventKind, seat: int | None = None, **payload: Any) -> GameEvent:
        event = GameEvent(seq=self.next_seq, kind=kind, seat=seat, payload=dict(payload))
        self.next_seq += 1
        self.history.append(event)
        for listener in list(self.listeners):
            listener(event)
        logger.debug("event %d %s seat=%s", event.seq, kind.value, seat)
        return event

    def since(self, seq: int) -> list[GameEvent]:
        """Return events with a sequence number greater than ``seq``."""

        return [event for event in self.history if event.seq > seq]
