"""Information-set Monte Carlo tree search package."""

from . import node, policy, rollout, search

__all__ = [
    "node",
    "policy",
    "rollout",
    "search",
]
