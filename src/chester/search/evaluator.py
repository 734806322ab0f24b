"""Evaluator protocol consulted by the search."""

from typing import Protocol

import numpy as np


class Evaluator(Protocol):
    """Scores encoded positions.

    Both scores are read as the probability that the reference side (white)
    wins. Implementations should be deterministic per call; nodes cache the
    results.
    """

    def policy(self, features: np.ndarray) -> float:
        """Score used to rank successors during rollouts."""
        ...

    def value(self, features: np.ndarray) -> float:
        """Score used to evaluate the search frontier."""
        ...


class RandomEvaluator:
    """Evaluator returning uniform random scores.

    Useful to exercise the search before any network has been trained.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def policy(self, features: np.ndarray) -> float:
        return float(self._rng.random())

    def value(self, features: np.ndarray) -> float:
        return float(self._rng.random())
