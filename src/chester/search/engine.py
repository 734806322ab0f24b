"""MCTS engine playing chess on top of a persistent search graph."""

from __future__ import annotations

import chess
import numpy as np
from loguru import logger

from chester.core.chess import ChessState
from chester.search.config import MCTSConfig
from chester.search.evaluator import Evaluator
from chester.search.graph import SearchGraph, UnknownPositionError
from chester.search.node import PositionNode


class MCTSEngine:
    """MCTS engine using UCB selection over a transposition graph.

    The search graph survives between `select_move` calls, so statistics
    gathered for a position are reused whenever the game (or another game)
    reaches it again. Call `reset()` to start from an empty graph.

    Each move:
        1. Seed the current position into the graph
        2. Run `num_iterations` MCTS iterations from it
        3. Play the move leading to the most visited successor
    """

    def __init__(self, evaluator: Evaluator, config: MCTSConfig | None = None) -> None:
        """Initialize the MCTSEngine.

        Args:
            evaluator: Policy/value scorer consulted at the frontier.
            config: MCTS configuration. Uses defaults if None.
        """
        self.evaluator = evaluator
        self.config = config or MCTSConfig()
        self.graph = self._new_graph()

        logger.debug(
            f"MCTSEngine initialized with num_iterations={self.config.num_iterations}, "
            f"c={self.config.exploration_constant}, leaf={self.config.leaf_evaluation.value}"
        )

    @property
    def name(self) -> str:
        """Return the engine name."""
        return f"MCTS(n={self.config.num_iterations})"

    def _new_graph(self) -> SearchGraph:
        return SearchGraph(
            leaf_evaluation=self.config.leaf_evaluation,
            rng=np.random.default_rng(self.config.seed),
        )

    def reset(self) -> None:
        """Discard the search graph."""
        self.graph = self._new_graph()

    def search(self, identity: int, iterations: int | None = None) -> int:
        """Run MCTS iterations from `identity`.

        If the identity is unknown to the graph, the search restarts from a
        randomly chosen expanded position instead.

        Args:
            identity: Root position identity.
            iterations: Iteration count. Defaults to `config.num_iterations`.

        Returns:
            The identity that was actually searched.
        """
        iterations = self.config.num_iterations if iterations is None else iterations

        try:
            self.graph.resolve(identity)
        except UnknownPositionError:
            fallback = self.graph.random_identity()
            logger.warning(f"Position {identity:#x} is unknown; searching {fallback:#x} instead")
            identity = fallback

        for _ in range(iterations):
            self.graph.run_iteration(
                identity,
                self.evaluator,
                self.config.exploration_constant,
                self.config.rollout_depth,
            )

        return identity

    def select_move(self, board: chess.Board) -> chess.Move | None:
        """Run MCTS and return the move with the highest visit count.

        Args:
            board: Current chess position (not modified).

        Returns:
            The selected move, or None if no legal moves exist.
        """
        state = ChessState(board.copy(stack=False))
        moves = state.moves()
        if not moves:
            return None

        if len(moves) == 1:
            return moves[0]

        identity = self.graph.seed(state)
        self.search(identity)

        root = self.graph.resolve(identity)
        if not root.children:
            # Drawn by rule with legal moves left (e.g. insufficient material)
            return moves[0]

        best_index = max(
            range(len(root.children)),
            key=lambda i: self.graph.resolve(root.children[i]).visits,
        )
        logger.debug(f"Searched {len(self.graph)} positions, best move {moves[best_index].uci()}")
        return moves[best_index]

    def get_root_stats(self, board: chess.Board) -> dict[chess.Move, dict[str, float]]:
        """Statistics for every legal move from `board`.

        Returns:
            Dictionary mapping moves to visits (N), exploitation score (Q,
            NaN when unvisited) and cached value (V, NaN when not evaluated).
        """
        state = ChessState(board.copy(stack=False))
        root = self.graph.node(state.identity())
        if root is None:
            return {}

        stats: dict[chess.Move, dict[str, float]] = {}
        for move, identity in zip(state.moves(), root.children):
            child = self.graph.node(identity)
            stats[move] = _node_stats(child)

        return stats


def _node_stats(node: PositionNode | None) -> dict[str, float]:
    if node is None:
        return {"N": 0, "Q": float("nan"), "V": float("nan")}
    return {
        "N": node.visits,
        "Q": node.exploitation() if node.visits else float("nan"),
        "V": node.cached_value if node.cached_value is not None else float("nan"),
    }
