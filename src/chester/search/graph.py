"""Transposition-aware MCTS search graph."""

from __future__ import annotations

import math
from collections.abc import Iterator

import numpy as np
from loguru import logger

from chester.core.game import REFERENCE_SIDE, GameState
from chester.search.config import LeafEvaluation
from chester.search.evaluator import Evaluator
from chester.search.node import PositionNode


class UnknownPositionError(LookupError):
    """Raised when an identity was never discovered by the graph."""

    def __init__(self, identity: int) -> None:
        super().__init__(f"Position {identity:#x} is neither expanded nor pending")
        self.identity = identity


class SearchGraph:
    """Arena of position nodes searched with UCB-driven MCTS.

    The graph keeps two disjoint mappings:

        expanded: identity -> PositionNode   (promoted, with statistics)
        pending:  identity -> GameState      (seen as a child, not yet promoted)

    A state enters `pending` the first time it is seen as someone's successor
    and is promoted to `expanded` the first time the search resolves it.
    Parents refer to children by identity only, so transpositions share one
    node and there are no reference cycles.

    Each call to `run_iteration` performs:
        1. SELECT: descend from the root by UCB until an unvisited or
           terminal node (the frontier)
        2. EXPAND: children are promoted lazily as selection resolves them
        3. EVALUATE: score the frontier with the evaluator (or game result)
        4. BACKPROPAGATE: `increment` every node on the descent path
    """

    def __init__(
        self,
        leaf_evaluation: LeafEvaluation | str = LeafEvaluation.VALUE,
        rng: np.random.Generator | None = None,
    ) -> None:
        """Initialize an empty graph.

        Args:
            leaf_evaluation: How the frontier is scored.
            rng: Random generator used by `random_identity`.
        """
        self.leaf_evaluation = LeafEvaluation(leaf_evaluation)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._expanded: dict[int, PositionNode] = {}
        self._pending: dict[int, GameState] = {}

    @classmethod
    def from_position(cls, state: GameState, **kwargs) -> SearchGraph:
        """Create a graph seeded with `state` as an expanded node."""
        graph = cls(**kwargs)
        graph.seed(state)
        return graph

    def __len__(self) -> int:
        """Number of expanded nodes."""
        return len(self._expanded)

    def __contains__(self, identity: object) -> bool:
        return identity in self._expanded or identity in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def node(self, identity: int) -> PositionNode | None:
        """The expanded node for `identity`, without promoting anything."""
        return self._expanded.get(identity)

    # -------------------------------------------------------------------------
    # Expansion
    # -------------------------------------------------------------------------

    def seed(self, state: GameState) -> int:
        """Register `state` as a root and expand it.

        Returns:
            The state's identity.
        """
        identity = state.identity()
        self.discover(identity, state)
        self.resolve(identity)
        return identity

    def discover(self, identity: int, state: GameState) -> None:
        """Remember `state` as a pending candidate unless already known."""
        if identity in self._expanded or identity in self._pending:
            return
        self._pending[identity] = state

    def resolve(self, identity: int) -> PositionNode:
        """Return the node for `identity`, promoting it from pending if needed.

        Raises:
            UnknownPositionError: If the identity is neither expanded nor pending.
        """
        node = self._expanded.get(identity)
        if node is not None:
            return node

        state = self._pending.get(identity)
        if state is None:
            raise UnknownPositionError(identity)

        successors = [] if state.status().is_terminal else state.successors()
        node = PositionNode.from_state(identity, state, successors)
        self._expanded[identity] = node
        del self._pending[identity]

        for child_identity, child in zip(node.children, successors):
            self.discover(child_identity, child)

        return node

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def run_iteration(
        self,
        root_identity: int,
        evaluator: Evaluator,
        exploration_constant: float,
        rollout_depth: int = 0,
    ) -> float:
        """Run one select/expand/evaluate/backpropagate cycle.

        Args:
            root_identity: Identity to search from.
            evaluator: Scores frontier positions.
            exploration_constant: The `c` in the UCB exploration term.
            rollout_depth: Policy-guided moves before the value call. Only
                used with LeafEvaluation.ROLLOUT.

        Returns:
            The score backed up along the descent path.

        Raises:
            UnknownPositionError: If the root cannot be resolved.
        """
        root = self.resolve(root_identity)
        path = self._select(root, exploration_constant)
        score = self._evaluate_leaf(path[-1], evaluator, rollout_depth)

        for node in path:
            node.increment(score)

        return score

    def _select(self, root: PositionNode, exploration_constant: float) -> list[PositionNode]:
        """Descend by UCB and return the path from root to frontier."""
        path = [root]
        on_path = {root.identity}
        node = root

        while node.visits > 0 and node.children:
            child = self._select_child(node, exploration_constant, on_path)
            if child is None:
                # Every child repeats a position already on this path
                break
            path.append(child)
            on_path.add(child.identity)
            node = child

        return path

    def _select_child(
        self, node: PositionNode, exploration_constant: float, exclude: set[int]
    ) -> PositionNode | None:
        """Child of a visited node with the highest UCB score for its side to move (first wins ties)."""
        best: PositionNode | None = None
        best_score = -math.inf

        for identity in node.children:
            child = self.resolve(identity)
            if identity in exclude:
                continue

            score = child.ucb(node.visits, exploration_constant, node.side_to_move)
            if best is None or score > best_score:
                best = child
                best_score = score

        return best

    def _evaluate_leaf(self, node: PositionNode, evaluator: Evaluator, rollout_depth: int) -> float:
        if node.terminal_score is not None:
            return node.terminal_score
        if self.leaf_evaluation is LeafEvaluation.ROLLOUT:
            return self._rollout(node, evaluator, rollout_depth)
        return node.value(evaluator)

    def _rollout(self, node: PositionNode, evaluator: Evaluator, depth: int) -> float:
        """Follow the policy for up to `depth` moves, then take the value.

        White follows the successor with the highest policy score, black the
        one with the lowest.
        """
        while True:
            if node.terminal_score is not None:
                return node.terminal_score
            if depth == 0 or not node.children:
                return node.value(evaluator)

            children = [self.resolve(identity) for identity in node.children]
            scores = [child.policy(evaluator) for child in children]
            pick = max if node.side_to_move is REFERENCE_SIDE else min
            node = children[pick(range(len(scores)), key=scores.__getitem__)]
            depth -= 1

    # -------------------------------------------------------------------------
    # Driver access
    # -------------------------------------------------------------------------

    def training_data(self, min_visits: int = 0) -> Iterator[tuple[float, np.ndarray]]:
        """Yield (exploitation score, encoding) for nodes with more than `min_visits` visits.

        Each call starts a fresh pass over the graph.
        """
        for node in self._expanded.values():
            if node.visits > min_visits:
                yield node.exploitation(), node.encoding

    def random_identity(self) -> int:
        """Uniformly sample the identity of an expanded node.

        Raises:
            LookupError: If nothing has been expanded yet.
        """
        if not self._expanded:
            msg = "Cannot sample a position from an empty search graph"
            raise LookupError(msg)
        identities = list(self._expanded)
        identity = identities[int(self._rng.integers(len(identities)))]
        logger.debug(f"Sampled position {identity:#x} out of {len(identities)}")
        return identity
