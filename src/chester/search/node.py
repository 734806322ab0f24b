"""Position node data structure."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from chester.core.game import REFERENCE_SIDE, GameState, Side
from chester.search.evaluator import Evaluator


@dataclass(eq=False)
class PositionNode:
    """One unique game position in the search graph.

    Nodes are shared: every move sequence that reaches the same identity
    reaches the same node. Children are stored as identities and looked up
    through the graph.

    Statistics:
        visits: Number of iterations whose descent passed through this node.
        accumulator: Sum of backed-up scores, each complemented when the side
            to move here is not the reference side.

    Attributes:
        identity: Position fingerprint.
        encoding: Feature vector, computed once at creation.
        side_to_move: Side to move in this position.
        children: Successor identities in move-generation order. Empty for
            terminal positions.
        terminal_score: Game result from the reference side's perspective
            (1 win, 0 loss, 0.5 draw), or None if the game is not over.
        cached_policy: Evaluator policy score, filled on first use.
        cached_value: Evaluator value score, filled on first use.
    """

    identity: int
    encoding: np.ndarray
    side_to_move: Side
    children: tuple[int, ...] = ()
    terminal_score: float | None = None
    visits: int = 0
    accumulator: float = 0.0
    cached_policy: float | None = None
    cached_value: float | None = None

    @classmethod
    def from_state(
        cls, identity: int, state: GameState, successors: Sequence[GameState]
    ) -> PositionNode:
        """Build a node for `state`; terminal positions get no children."""
        status = state.status()
        children = () if status.is_terminal else tuple(child.identity() for child in successors)
        return cls(
            identity=identity,
            encoding=np.asarray(state.encode(), dtype=np.float64),
            side_to_move=state.side_to_move,
            children=children,
            terminal_score=status.score,
        )

    @property
    def is_terminal(self) -> bool:
        return not self.children

    @property
    def is_reference_side(self) -> bool:
        return self.side_to_move is REFERENCE_SIDE

    def increment(self, score: float) -> None:
        """Record one more visit that backed up `score`."""
        self.visits += 1
        self.accumulator += score if self.is_reference_side else 1.0 - score

    def exploitation(self) -> float:
        """Visit-normalized accumulator, flipped for the non-reference side.

        Only defined once the node has been visited.
        """
        mean = self.accumulator / self.visits
        return mean if self.is_reference_side else 1.0 - mean

    def exploration(self, parent_visits: int, c: float) -> float:
        """UCB confidence term sqrt(c * ln(N) / n)."""
        return math.sqrt(c * math.log(parent_visits) / self.visits)

    def ucb(self, parent_visits: int, c: float, for_side: Side = REFERENCE_SIDE) -> float:
        """Selection score for the side choosing this node; unvisited nodes always come first.

        Args:
            parent_visits: Visits of the parent being expanded from.
            c: Exploration constant.
            for_side: Side to move at the parent. Exploitation is read from
                the reference side's view, so it is complemented for the other side.
        """
        if self.visits == 0:
            return math.inf
        exploitation = self.exploitation()
        if for_side is not REFERENCE_SIDE:
            exploitation = 1.0 - exploitation
        return exploitation + self.exploration(parent_visits, c)

    def policy(self, evaluator: Evaluator) -> float:
        if self.cached_policy is None:
            self.cached_policy = evaluator.policy(self.encoding)
        return self.cached_policy

    def value(self, evaluator: Evaluator) -> float:
        if self.cached_value is None:
            self.cached_value = evaluator.value(self.encoding)
        return self.cached_value

    def __repr__(self) -> str:
        mean = f"{self.accumulator / self.visits:.3f}" if self.visits else "-"
        return (
            f"PositionNode({self.identity:#018x}, N={self.visits}, mean={mean}, "
            f"children={len(self.children)})"
        )
