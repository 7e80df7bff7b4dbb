"""In-memory room registry: per-room locking and off-lock AI turns."""

from __future__ import annotations

import logging
import random
import threading
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Sequence, TypeVar

from .agent import Decision, Difficulty, apply_decision, decide, decide_async
from .cards import Card
from .engine import GameEngine, MaskedView
from .ismcts.search import SearchConfig
from .rules import ConfigError, GameError, StateError
from .scoreboard import SettlementEntry
from .state import SEAT_COUNT, GameConfig, GameState, TablePlay

__all__ = ["Room", "RoomRegistry", "run_ai_turn", "run_ai_turn_async"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, eq=False)
class Room:
    """A single table. Every mutation holds ``lock`` and bumps ``version``.

    ``generation`` changes whenever the room is reset or torn down so that
    work started against an older game can be recognised and dropped.
    """

    room_id: str
    engine: GameEngine
    player_ids: list[str]
    ai_seats: Dict[int, Difficulty] = field(default_factory=dict)
    rng: random.Random = field(default_factory=random.Random)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    generation: int = 0
    version: int = 0
    closed: bool = False

    def _mutate(self, operation: Callable[..., T], *args: object) -> T:
        with self.lock:
            if self.closed:
                raise StateError(f"room {self.room_id} has been closed")
            result = operation(*args)
            self.version += 1
            return result

    def start_game(self, deck: Sequence[Card] | None = None) -> GameState:
        def _start() -> GameState:
            return self.engine.start_game(self.player_ids, deck=deck)

        return self._mutate(_start)

    def bid(self, seat: int, score: int) -> None:
        self._mutate(self.engine.bid, seat, score)

    def take_hole(self, seat: int) -> None:
        self._mutate(self.engine.take_hole, seat)

    def play_cards(self, seat: int, codes: Sequence[str]) -> TablePlay:
        return self._mutate(self.engine.play_cards, seat, list(codes))

    def pass_turn(self, seat: int) -> bool:
        return self._mutate(self.engine.pass_turn, seat)

    def undo(self, seat: int) -> None:
        self._mutate(self.engine.undo, seat)

    def set_settlement_multiplier(self, authority_seat: int, multiplier: int) -> SettlementEntry:
        return self._mutate(self.engine.set_settlement_multiplier, authority_seat, multiplier)

    def masked_view(self, seat: int) -> MaskedView:
        with self.lock:
            return self.engine.masked_view(seat)

    def snapshot(self) -> tuple[GameState, int, int]:
        """Return a deep copy of the state with the generation and version it matches."""

        with self.lock:
            return self.engine.snapshot(), self.generation, self.version

    def next_seed(self) -> int:
        with self.lock:
            return self.rng.getrandbits(64)

    def reset(self) -> None:
        with self.lock:
            self.engine.reset()
            self.generation += 1
            self.version += 1

    def close(self) -> None:
        with self.lock:
            self.closed = True
            self.generation += 1


class RoomRegistry:
    """Thread-safe map of room id to :class:`Room`."""

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def create(
        self,
        player_ids: Sequence[str],
        *,
        ai_seats: Mapping[int, Difficulty] | None = None,
        config: GameConfig | None = None,
        seed: int | None = None,
    ) -> Room:
        if len(player_ids) != SEAT_COUNT:
            raise ConfigError(f"exactly {SEAT_COUNT} players are required, got {len(player_ids)}")
        seats = dict(ai_seats or {})
        for seat in seats:
            if not 0 <= seat < SEAT_COUNT:
                raise ConfigError(f"AI seat {seat} is not at the table")
        room_id = str(uuid.uuid4())[:8]
        rng = random.Random(seed)
        engine = GameEngine(config, rng=random.Random(rng.getrandbits(64)))
        room = Room(
            room_id=room_id,
            engine=engine,
            player_ids=list(player_ids),
            ai_seats=seats,
            rng=rng,
        )
        with self._lock:
            self._rooms[room_id] = room
        logger.info("room %s created with AI seats %s", room_id, sorted(seats))
        return room

    def get(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            raise StateError(f"room {room_id} does not exist")
        return room

    def delete(self, room_id: str) -> None:
        with self._lock:
            room = self._rooms.pop(room_id, None)
        if room is None:
            raise StateError(f"room {room_id} does not exist")
        room.close()
        logger.info("room %s torn down", room_id)

    def reset(self, room_id: str) -> Room:
        room = self.get(room_id)
        room.reset()
        return room

    def __contains__(self, room_id: object) -> bool:
        with self._lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __bool__(self) -> bool:
        return True


def _prepare(room: Room, seat: int) -> tuple[Difficulty, GameState, int, int, random.Random]:
    difficulty = room.ai_seats.get(seat)
    if difficulty is None:
        raise ConfigError(f"seat {seat} is not controlled by the AI")
    state, generation, version = room.snapshot()
    return difficulty, state, generation, version, random.Random(room.next_seed())


def _commit(room: Room, decision: Decision, generation: int, version: int) -> Decision | None:
    with room.lock:
        if room.closed or room.generation != generation or room.version != version:
            logger.info(
                "discarding stale AI %s for seat %d in room %s",
                decision.kind.value,
                decision.seat,
                room.room_id,
            )
            return None
        try:
            apply_decision(room.engine, decision)
        except GameError as exc:
            logger.info("AI %s for seat %d rejected: %s", decision.kind.value, decision.seat, exc)
            return None
        room.version += 1
    return decision


def run_ai_turn(
    room: Room, seat: int, *, search_config: SearchConfig | None = None
) -> Decision | None:
    """Decide for ``seat`` on a snapshot and apply it if the room has not moved on."""

    difficulty, state, generation, version, rng = _prepare(room, seat)
    decision = decide(state, seat, difficulty, rng, search_config=search_config)
    return _commit(room, decision, generation, version)


async def run_ai_turn_async(
    room: Room, seat: int, *, search_config: SearchConfig | None = None
) -> Decision | None:
    difficulty, state, generation, version, rng = _prepare(room, seat)
    decision = await decide_async(state, seat, difficulty, rng, search_config=search_config)
    return _commit(room, decision, generation, version)
