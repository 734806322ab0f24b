"""Feed-forward layer chains with hand-written backpropagation.

A network is the head `Layer` of a singly-linked chain. Each layer owns the
next one; the chain is trained, scaled, grown and persisted as a whole.

Persisted form (one nested record per layer):

    {
        "weights": [[...], ...],    # outputs x inputs
        "biases": [...],            # outputs
        "activation": "LeakyReLU",  # Linear | ReLU | LeakyReLU | Softmax
        "next": {...} | null
    }
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import numpy as np
from loguru import logger

from chester.nn.activations import Activation
from chester.nn.costs import Cost

_RECORD_KEYS = ("weights", "biases", "activation")


class NetworkShapeError(ValueError):
    """Raised when vector or matrix widths do not line up."""

    pass


class MalformedNetworkError(ValueError):
    """Raised when a persisted network record cannot be loaded."""

    pass


class Layer:
    """One dense layer and, through `next`, the rest of the chain.

    Attributes:
        weights: (outputs, inputs) weight matrix.
        biases: (outputs,) bias vector.
        activation: Activation applied to `weights @ x + biases`.
        next: The following layer, or None at the tail.
    """

    def __init__(
        self,
        weights: np.ndarray | list[list[float]],
        biases: np.ndarray | list[float],
        activation: Activation | str = Activation.LINEAR,
        next_layer: Layer | None = None,
    ) -> None:
        weights = np.array(weights, dtype=np.float64)
        biases = np.array(biases, dtype=np.float64)

        if weights.ndim != 2 or weights.size == 0:
            msg = f"weights must be a non-empty 2-D matrix, got shape {weights.shape}"
            raise NetworkShapeError(msg)
        if biases.shape != (weights.shape[0],):
            msg = f"biases shape {biases.shape} does not match {weights.shape[0]} outputs"
            raise NetworkShapeError(msg)

        self.weights = weights
        self.biases = biases
        self.activation = Activation(activation)
        self.next: Layer | None = None

        if next_layer is not None:
            self.add_layer(next_layer)

    @classmethod
    def random(
        cls,
        inputs: int,
        outputs: int,
        activation: Activation | str,
        rng: np.random.Generator | None = None,
    ) -> Layer:
        """Create a layer with parameters drawn uniformly from [-0.5, 0.5)."""
        rng = rng if rng is not None else np.random.default_rng()
        return cls(
            weights=rng.random((outputs, inputs)) - 0.5,
            biases=rng.random(outputs) - 0.5,
            activation=activation,
        )

    # -------------------------------------------------------------------------
    # Chain structure
    # -------------------------------------------------------------------------

    @property
    def input_size(self) -> int:
        return self.weights.shape[1]

    @property
    def output_size(self) -> int:
        return self.weights.shape[0]

    @property
    def tail(self) -> Layer:
        """The last layer of the chain."""
        layer = self
        while layer.next is not None:
            layer = layer.next
        return layer

    @property
    def depth(self) -> int:
        """Number of layers in the chain starting here."""
        return sum(1 for _ in self)

    def __iter__(self) -> Iterator[Layer]:
        layer: Layer | None = self
        while layer is not None:
            yield layer
            layer = layer.next

    def add_layer(self, layer: Layer) -> None:
        """Append `layer` (and anything chained after it) at the tail."""
        tail = self.tail
        if layer.input_size != tail.output_size:
            msg = (
                f"Cannot append a layer with {layer.input_size} inputs "
                f"after a layer with {tail.output_size} outputs"
            )
            raise NetworkShapeError(msg)
        tail.next = layer

    def add_random_layer(
        self,
        size: int,
        activation: Activation | str,
        rng: np.random.Generator | None = None,
    ) -> None:
        """Append a randomly initialized layer of width `size`."""
        self.add_layer(Layer.random(self.tail.output_size, size, activation, rng))

    def scale(self, factor: float) -> None:
        """Multiply every weight and bias in the chain by `factor`."""
        for layer in self:
            layer.weights *= factor
            layer.biases *= factor

    # -------------------------------------------------------------------------
    # Forward / backward
    # -------------------------------------------------------------------------

    def _check_input(self, inputs: np.ndarray | list[float]) -> np.ndarray:
        inputs = np.asarray(inputs, dtype=np.float64)
        if inputs.shape != (self.input_size,):
            msg = f"Expected an input vector of width {self.input_size}, got shape {inputs.shape}"
            raise NetworkShapeError(msg)
        return inputs

    def _apply(self, inputs: np.ndarray) -> np.ndarray:
        return self.activation.apply(self.weights @ inputs + self.biases)

    def predict(self, inputs: np.ndarray | list[float]) -> np.ndarray:
        """Forward pass through the whole chain."""
        x = self._check_input(inputs)
        for layer in self:
            x = layer._apply(x)
        return x

    def differentiate(
        self, inputs: np.ndarray, doutput: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Gradients of this layer given the gradient at its output.

        The activation derivative is applied once and shared: the weight
        gradient and the input gradient both use `delta = diff(z) * doutput`,
        while the bias gradient is `doutput` itself.

        Args:
            inputs: The vector this layer received in the forward pass.
            doutput: Gradient of the cost with respect to this layer's output.

        Returns:
            Tuple of (weight gradient, bias gradient, input gradient).
        """
        z = self.weights @ inputs + self.biases
        delta = self.activation.diff(z) * doutput

        dweights = np.outer(delta, inputs)
        dbiases = np.array(doutput, dtype=np.float64)
        dinputs = delta @ self.weights

        return dweights, dbiases, dinputs

    def train(
        self,
        inputs: np.ndarray | list[float],
        targets: np.ndarray | list[float],
        cost: Cost | str,
        learning_rate: float,
    ) -> np.ndarray:
        """Run one gradient step on a single example.

        Every layer is updated in place with `param -= gradient * learning_rate`.

        Args:
            inputs: Network input.
            targets: Desired network output.
            cost: Cost whose gradient drives the update.
            learning_rate: Step size.

        Returns:
            Gradient of the cost with respect to `inputs`.
        """
        cost = Cost(cost)
        x = self._check_input(inputs)
        targets = np.asarray(targets, dtype=np.float64)

        layers = list(self)
        if targets.shape != (layers[-1].output_size,):
            msg = f"Expected a target vector of width {layers[-1].output_size}, got shape {targets.shape}"
            raise NetworkShapeError(msg)

        layer_inputs = []
        for layer in layers:
            layer_inputs.append(x)
            x = layer._apply(x)

        grad = cost.diff(x, targets)
        for layer, layer_input in zip(reversed(layers), reversed(layer_inputs)):
            dweights, dbiases, grad = layer.differentiate(layer_input, grad)
            layer.weights -= dweights * learning_rate
            layer.biases -= dbiases * learning_rate

        return grad

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Nested record of the whole chain (see module docstring)."""
        record: dict[str, Any] | None = None
        for layer in reversed(list(self)):
            record = {
                "weights": layer.weights.tolist(),
                "biases": layer.biases.tolist(),
                "activation": layer.activation.value,
                "next": record,
            }
        assert record is not None
        return record

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> Layer:
        """Rebuild a chain from a nested record.

        Raises:
            MalformedNetworkError: If a record is missing fields, holds an
                unknown activation tag, or has inconsistent shapes.
        """
        records = []
        current: Any = record
        while current is not None:
            if not isinstance(current, dict):
                msg = f"Layer record {len(records)} must be a mapping, got {type(current).__name__}"
                raise MalformedNetworkError(msg)
            missing = [key for key in _RECORD_KEYS if key not in current]
            if missing:
                msg = f"Layer record {len(records)} is missing fields: {missing}"
                raise MalformedNetworkError(msg)
            records.append(current)
            current = current.get("next")

        head: Layer | None = None
        for index in range(len(records) - 1, -1, -1):
            entry = records[index]
            try:
                head = cls(entry["weights"], entry["biases"], entry["activation"], next_layer=head)
            except (TypeError, ValueError) as e:
                msg = f"Layer record {index} is invalid: {e}"
                raise MalformedNetworkError(msg) from e

        assert head is not None
        return head

    def save(self, path: str | Path) -> None:
        """Write the chain to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict()))
        logger.debug(f"Saved {self.depth}-layer network to {path}")

    @classmethod
    def load(cls, path: str | Path) -> Layer:
        """Read a chain written by `save`."""
        path = Path(path)
        try:
            record = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            msg = f"Network file {path} is not valid JSON: {e}"
            raise MalformedNetworkError(msg) from e
        return cls.from_dict(record)

    def __repr__(self) -> str:
        widths = " -> ".join([str(self.input_size), *(str(layer.output_size) for layer in self)])
        activations = ", ".join(layer.activation.value for layer in self)
        return f"Layer({widths}; {activations})"
