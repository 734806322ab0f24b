"""MCTS configuration."""

from dataclasses import dataclass
from enum import Enum


class LeafEvaluation(str, Enum):
    """How the frontier of an iteration is scored.

    VALUE scores the frontier with the evaluator's value function.
    ROLLOUT follows the policy function for up to `rollout_depth` moves
    and scores the position it stops at with the value function.
    """

    VALUE = "value"
    ROLLOUT = "rollout"


@dataclass(frozen=True)
class MCTSConfig:
    """Configuration for MCTS search.

    Attributes:
        exploration_constant: The `c` in the UCB exploration term
            sqrt(c * ln(N) / n). Higher values favour less-visited children.
        num_iterations: Iterations run per `select_move` call.
        rollout_depth: Maximum policy-guided moves per rollout. Only read
            when `leaf_evaluation` is ROLLOUT.
        leaf_evaluation: Frontier scoring mode.
        seed: Seed for the graph's random number generator (used when
            sampling a fallback root).
    """

    exploration_constant: float = 2.0
    num_iterations: int = 200
    rollout_depth: int = 3
    leaf_evaluation: LeafEvaluation = LeafEvaluation.VALUE
    seed: int | None = None

    def __post_init__(self) -> None:
        """Coerce string modes coming from YAML and validate."""
        if not isinstance(self.leaf_evaluation, LeafEvaluation):
            object.__setattr__(self, "leaf_evaluation", LeafEvaluation(self.leaf_evaluation))

        if self.exploration_constant < 0:
            msg = f"exploration_constant must be non-negative, got {self.exploration_constant}"
            raise ValueError(msg)

        if self.rollout_depth < 0:
            msg = f"rollout_depth must be non-negative, got {self.rollout_depth}"
            raise ValueError(msg)
