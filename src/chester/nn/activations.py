"""Activation functions and their derivatives."""

from enum import Enum

import numpy as np

LEAKY_SLOPE = 0.1
# LeakyReLU derivative for x <= 0 (not LEAKY_SLOPE).
LEAKY_DIFF_SLOPE = 0.01


class Activation(Enum):
    """Elementwise (or, for Softmax, vector-wise) layer activation.

    The enum value is the tag written to persisted networks.
    """

    LINEAR = "Linear"
    RELU = "ReLU"
    LEAKY_RELU = "LeakyReLU"
    SOFTMAX = "Softmax"

    def apply(self, x: np.ndarray) -> np.ndarray:
        """Apply the activation to pre-activation sums `x`."""
        if self is Activation.RELU:
            return np.maximum(x, 0.0)
        if self is Activation.LEAKY_RELU:
            return np.maximum(x, LEAKY_SLOPE * x)
        if self is Activation.SOFTMAX:
            # Shifting by the max leaves the result unchanged and avoids overflow
            exp = np.exp(x - np.max(x))
            return exp / np.sum(exp)
        return np.array(x, dtype=np.float64)

    def diff(self, x: np.ndarray) -> np.ndarray:
        """Per-element derivative used by the backward pass.

        For Softmax this is the row sum of the full Jacobian
        (s_i * (1 - s_i) on the diagonal, -s_i * s_j elsewhere).
        """
        if self is Activation.RELU:
            return np.where(x > 0.0, 1.0, 0.0)
        if self is Activation.LEAKY_RELU:
            return np.where(x > 0.0, 1.0, LEAKY_DIFF_SLOPE)
        if self is Activation.SOFTMAX:
            s = self.apply(x)
            jacobian = np.diag(s) - np.outer(s, s)
            return jacobian.sum(axis=1)
        return np.ones(x.shape[0])
