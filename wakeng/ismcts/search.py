"""Search loop for the dig-the-hole IS-MCTS implementation."""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from dataclasses import dataclass

from .. import actions
from ..actions import Move, move_key
from ..determinize import sample_world
from ..state import GameState, Phase
from . import rollout
from .node import MoveKey, Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Configuration values for IS-MCTS search.

    The search stops after ``iterations`` or once ``time_budget`` seconds have
    elapsed, whichever comes first.
    """

    iterations: int = 1000
    time_budget: float | None = None
    exploration: float = math.sqrt(2.0)
    rollout_depth: int = rollout.DEFAULT_MAX_DEPTH
    yield_every: int = 100


@dataclass(slots=True)
class SearchResult:
    """Outcome of a search; ``move`` is ``None`` when nothing was explored."""

    move: Move | None
    root: Node
    iterations: int
    elapsed: float


def _describe(move: Move | None) -> str:
    if move is None:
        return "none"
    if not move:
        return "pass"
    return " ".join(card.code for card in move)


class _Search:
    """One search over the information set of ``seat`` at ``state``."""

    def __init__(self, state: GameState, seat: int, rng: random.Random, config: SearchConfig) -> None:
        self.state = state
        self.seat = seat
        self.rng = rng
        self.config = config
        self.root = Node()
        self.root_moves: dict[MoveKey, Move] = {
            move_key(move): move for move in actions.legal_moves(state, seat)
        }
        self.iterations = 0
        self.started = time.perf_counter()

    def elapsed(self) -> float:
        return time.perf_counter() - self.started

    def done(self) -> bool:
        if self.iterations >= self.config.iterations:
            return True
        budget = self.config.time_budget
        return budget is not None and self.elapsed() >= budget

    def iterate(self) -> None:
        world = sample_world(self.state, self.rng, self.seat)
        node = self.root

        while world.phase is Phase.PLAYING:
            mover = world.current_turn
            keyed = {move_key(move): move for move in actions.legal_moves(world, mover)}
            if not keyed:
                break
            untried = [key for key in keyed if key not in node.children]
            if untried:
                key = untried[self.rng.randrange(len(untried))]
                move = keyed[key]
                actions.apply_move(world, mover, move)
                node = node.add_child(key, move, mover)
                break
            child = node.select_child(keyed.keys(), self.config.exploration)
            if child is None or child.key is None:
                break
            # The stored move may hold other suits; replay this world's cards.
            actions.apply_move(world, mover, keyed[child.key])
            node = child

        winner = rollout.simulate(world, self.rng, self.config.rollout_depth)
        node.backpropagate(winner, world.digger)
        self.iterations += 1

    def result(self) -> SearchResult:
        best = self.root.best_child(self.root_moves.keys())
        move = self.root_moves[best.key] if best is not None and best.key is not None else None
        elapsed = self.elapsed()
        logger.debug(
            "search seat=%d: %d iterations in %.3fs, best=%s (%d visits)",
            self.seat,
            self.iterations,
            elapsed,
            _describe(move),
            best.visits if best is not None else 0,
        )
        return SearchResult(move=move, root=self.root, iterations=self.iterations, elapsed=elapsed)

    def trivial(self) -> SearchResult | None:
        """Short-circuit when the decision has at most one option."""

        if len(self.root_moves) > 1:
            return None
        move = next(iter(self.root_moves.values()), None)
        return SearchResult(move=move, root=self.root, iterations=0, elapsed=self.elapsed())


def run_search(
    state: GameState, seat: int, rng: random.Random, config: SearchConfig | None = None
) -> SearchResult:
    """Run IS-MCTS for ``seat`` and return the most visited legal root move."""

    search = _Search(state, seat, rng, config or SearchConfig())
    trivial = search.trivial()
    if trivial is not None:
        return trivial
    while not search.done():
        search.iterate()
    return search.result()


async def run_search_async(
    state: GameState, seat: int, rng: random.Random, config: SearchConfig | None = None
) -> SearchResult:
    """Same as :func:`run_search`, yielding to the event loop periodically."""

    search = _Search(state, seat, rng, config or SearchConfig())
    trivial = search.trivial()
    if trivial is not None:
        return trivial
    every = max(1, search.config.yield_every)
    while not search.done():
        search.iterate()
        if search.iterations % every == 0:
            await asyncio.sleep(0)
    return search.result()
