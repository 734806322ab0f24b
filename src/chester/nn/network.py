"""Policy/value network pair used as the search evaluator."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
from loguru import logger

from chester.core.chess.encoding import ENCODING_SIZE
from chester.nn.activations import Activation
from chester.nn.costs import Cost
from chester.nn.layer import Layer, MalformedNetworkError, NetworkShapeError

if TYPE_CHECKING:
    from chester.core.configs.schema import NetworkConfig

DEFAULT_POLICY_SHAPE = (500, 250, 100)
DEFAULT_VALUE_SHAPE = (750, 500, 250, 100, 10)
HIDDEN_ACTIVATION = Activation.LEAKY_RELU


def _build_head(
    input_size: int,
    shape: Sequence[int],
    scale: float,
    rng: np.random.Generator,
) -> Layer:
    head = Layer.random(input_size, shape[0], HIDDEN_ACTIVATION, rng)
    for width in shape[1:]:
        head.add_random_layer(width, HIDDEN_ACTIVATION, rng)
    head.add_random_layer(2, Activation.SOFTMAX, rng)
    head.scale(scale)
    return head


class PolicyValueNetwork:
    """Two independent layer chains scoring encoded positions.

    Both heads end in a 2-way Softmax whose first output is the probability
    that white wins. `policy` is used to rank candidate moves during rollouts,
    `value` to score search leaves.

    Attributes:
        policy_head: Layer chain behind `policy()`.
        value_head: Layer chain behind `value()`.
    """

    def __init__(self, policy_head: Layer, value_head: Layer) -> None:
        if policy_head.input_size != value_head.input_size:
            msg = (
                f"Policy head takes {policy_head.input_size} inputs "
                f"but value head takes {value_head.input_size}"
            )
            raise NetworkShapeError(msg)
        for name, head in (("policy", policy_head), ("value", value_head)):
            if head.tail.output_size != 2:
                msg = f"The {name} head must end in 2 outputs, got {head.tail.output_size}"
                raise NetworkShapeError(msg)

        self.policy_head = policy_head
        self.value_head = value_head

    @classmethod
    def from_shape(
        cls,
        policy_shape: Sequence[int] = DEFAULT_POLICY_SHAPE,
        value_shape: Sequence[int] = DEFAULT_VALUE_SHAPE,
        *,
        input_size: int = ENCODING_SIZE,
        policy_scale: float = 0.3,
        value_scale: float = 0.4,
        rng: np.random.Generator | None = None,
    ) -> PolicyValueNetwork:
        """Create a randomly initialized network.

        Args:
            policy_shape: Hidden widths of the policy head.
            value_shape: Hidden widths of the value head.
            input_size: Width of the position encoding.
            policy_scale: Factor applied to the fresh policy head.
            value_scale: Factor applied to the fresh value head.
            rng: Random generator for the initial parameters.

        Returns:
            A new PolicyValueNetwork.
        """
        if not policy_shape or not value_shape:
            msg = "Both heads need at least one hidden layer"
            raise ValueError(msg)

        rng = rng if rng is not None else np.random.default_rng()
        return cls(
            policy_head=_build_head(input_size, policy_shape, policy_scale, rng),
            value_head=_build_head(input_size, value_shape, value_scale, rng),
        )

    @classmethod
    def from_config(cls, config: NetworkConfig) -> PolicyValueNetwork:
        """Load the network at `config.path`, or build a fresh one from the config."""
        if config.path is not None:
            return cls.load(config.path)

        logger.info(
            f"Initializing network: policy={list(config.policy_shape)}, "
            f"value={list(config.value_shape)}"
        )
        return cls.from_shape(
            config.policy_shape,
            config.value_shape,
            input_size=config.input_size,
            policy_scale=config.policy_scale,
            value_scale=config.value_scale,
            rng=np.random.default_rng(config.seed),
        )

    @property
    def input_size(self) -> int:
        return self.policy_head.input_size

    def policy(self, features: np.ndarray) -> float:
        """Policy score of an encoded position."""
        return float(self.policy_head.predict(features)[0])

    def value(self, features: np.ndarray) -> float:
        """Value score of an encoded position."""
        return float(self.value_head.predict(features)[0])

    def train_policy(self, features: np.ndarray, outcome: float, learning_rate: float) -> np.ndarray:
        """Train the policy head toward [outcome, 1 - outcome]."""
        return self.policy_head.train(
            features, np.array([outcome, 1.0 - outcome]), Cost.CROSS_ENTROPY, learning_rate
        )

    def train_value(self, features: np.ndarray, outcome: float, learning_rate: float) -> np.ndarray:
        """Train the value head toward [outcome, 1 - outcome]."""
        return self.value_head.train(
            features, np.array([outcome, 1.0 - outcome]), Cost.CROSS_ENTROPY, learning_rate
        )

    def to_dict(self) -> dict[str, Any]:
        return {"policy": self.policy_head.to_dict(), "value": self.value_head.to_dict()}

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> PolicyValueNetwork:
        if not isinstance(record, dict) or "policy" not in record or "value" not in record:
            msg = "Network record must contain 'policy' and 'value' chains"
            raise MalformedNetworkError(msg)
        try:
            return cls(Layer.from_dict(record["policy"]), Layer.from_dict(record["value"]))
        except NetworkShapeError as e:
            raise MalformedNetworkError(str(e)) from e

    def save(self, path: str | Path) -> None:
        """Write both heads to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict()))
        logger.info(f"Saved network to {path}")

    @classmethod
    def load(cls, path: str | Path) -> PolicyValueNetwork:
        """Read a network written by `save`."""
        path = Path(path)
        if not path.exists():
            msg = f"Network file not found: {path}"
            raise FileNotFoundError(msg)

        try:
            record = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            msg = f"Network file {path} is not valid JSON: {e}"
            raise MalformedNetworkError(msg) from e

        network = cls.from_dict(record)
        logger.info(f"Loaded network from {path}: policy {network.policy_head!r}, value {network.value_head!r}")
        return network
