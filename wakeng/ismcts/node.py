"""Tree node definitions used by IS-MCTS."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Collection, Dict

from ..actions import Move
from ..rules import Side

MoveKey = tuple[int, ...]


@dataclass(slots=True, eq=False)
class Node:
    """A node reached by ``seat`` playing ``move``; the root has neither.

    Children are keyed by the suit-free move key so that one tree is shared by
    every determinization.
    """

    key: MoveKey | None = None
    move: Move | None = None
    seat: int | None = None
    parent: "Node | None" = None
    children: Dict[MoveKey, "Node"] = field(default_factory=dict)
    visits: int = 0
    wins: float = 0.0

    def ucb1(self, exploration: float) -> float:
        if self.visits == 0:
            return math.inf
        parent_visits = self.parent.visits if self.parent is not None else self.visits
        exploit = self.wins / self.visits
        return exploit + exploration * math.sqrt(math.log(max(parent_visits, 1)) / self.visits)

    def add_child(self, key: MoveKey, move: Move, seat: int) -> "Node":
        child = Node(key=key, move=move, seat=seat, parent=self)
        self.children[key] = child
        return child

    def select_child(self, legal_keys: Collection[MoveKey], exploration: float) -> "Node | None":
        """Pick the UCB1-best child among those legal in the current world."""

        best: Node | None = None
        best_score = -math.inf
        for key in legal_keys:
            child = self.children.get(key)
            if child is None:
                continue
            score = child.ucb1(exploration)
            if score > best_score:
                best = child
                best_score = score
        return best

    def best_child(self, legal_keys: Collection[MoveKey] | None = None) -> "Node | None":
        """Return the most visited child, optionally restricted to ``legal_keys``."""

        best: Node | None = None
        for key, child in self.children.items():
            if legal_keys is not None and key not in legal_keys:
                continue
            if best is None or child.visits > best.visits:
                best = child
        return best

    def backpropagate(self, winner_side: Side | None, digger: int | None) -> None:
        """Count a visit on every node up to the root and credit winning movers."""

        node: Node | None = self
        while node is not None:
            node.visits += 1
            if winner_side is not None and node.seat is not None:
                side = Side.DIGGER if node.seat == digger else Side.OTHERS
                if side is winner_side:
                    node.wins += 1.0
            node = node.parent
