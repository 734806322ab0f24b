"""Training loop for the policy/value network."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
from loguru import logger
from tqdm import tqdm

from chester.core.configs.schema import TrainingConfig
from chester.nn.costs import Cost

if TYPE_CHECKING:
    from chester.core.data import PositionDatabase, PositionRecord
    from chester.nn.network import PolicyValueNetwork
    from chester.search.graph import SearchGraph


class Trainer:
    """Single-example SGD trainer for a PolicyValueNetwork.

    Two sources of training data are supported:
    - Historical positions from a PositionDatabase, whose win rate is the
      target for both heads.
    - Search statistics from a SearchGraph, whose exploitation scores are
      the target for the value head.

    Training is epoch-based: each epoch samples a fresh random batch from
    the database, trains on it, saves a checkpoint and evaluates on a fixed
    held-out batch.
    """

    def __init__(self, network: PolicyValueNetwork, config: TrainingConfig | None = None) -> None:
        """Initialize the trainer.

        Args:
            network: Network to train in place.
            config: Training configuration. Uses defaults if None.
        """
        self.network = network
        self.config = config or TrainingConfig()
        self.epoch = 0

    def train_batch(self, records: Sequence[PositionRecord]) -> int:
        """Train both heads on every record of a batch.

        Returns:
            Number of examples trained on.
        """
        lr = self.config.learning_rate

        for record in tqdm(records, desc=f"Epoch {self.epoch}", unit="pos", leave=False):
            features = record.encode()
            outcome = record.win_rate
            self.network.train_policy(features, outcome, lr)
            self.network.train_value(features, outcome, lr)

        return len(records)

    def evaluate(self, records: Sequence[PositionRecord]) -> dict[str, float]:
        """Mean cross-entropy of both heads against the records' win rates."""
        if not records:
            return {"policy_loss": float("nan"), "value_loss": float("nan")}

        policy_loss = 0.0
        value_loss = 0.0
        for record in records:
            features = record.encode()
            targets = np.array(record.targets)
            policy = self.network.policy(features)
            value = self.network.value(features)
            policy_loss += Cost.CROSS_ENTROPY.apply(np.array([policy, 1.0 - policy]), targets).sum()
            value_loss += Cost.CROSS_ENTROPY.apply(np.array([value, 1.0 - value]), targets).sum()

        return {
            "policy_loss": float(policy_loss / len(records)),
            "value_loss": float(value_loss / len(records)),
        }

    def train_from_graph(self, graph: SearchGraph, min_visits: int | None = None) -> int:
        """Train the value head on search statistics.

        Args:
            graph: Searched graph supplying (exploitation, encoding) pairs.
            min_visits: Only nodes with more visits are used. Defaults to
                `config.min_visits`.

        Returns:
            Number of examples trained on.
        """
        min_visits = self.config.min_visits if min_visits is None else min_visits
        lr = self.config.learning_rate

        count = 0
        for score, encoding in graph.training_data(min_visits):
            self.network.train_value(encoding, score, lr)
            count += 1

        logger.info(f"Trained value head on {count} searched positions (min_visits={min_visits})")
        return count

    def fit(self, database: PositionDatabase, epochs: int | None = None) -> dict[str, float]:
        """Run the training loop against a position database.

        Args:
            database: Source of historical positions.
            epochs: Number of epochs. Defaults to `config.epochs`.

        Returns:
            Metrics of the last evaluation.
        """
        epochs = self.config.epochs if epochs is None else epochs
        test = database.get_batch(self.config.eval_min_occurrences, self.config.eval_size)

        logger.info(
            f"Starting training for {epochs} epochs of {self.config.batch_size} positions "
            f"(lr={self.config.learning_rate}, {len(test)} held-out positions)"
        )

        metrics: dict[str, float] = {}
        for _ in range(epochs):
            batch = database.get_batch(self.config.min_occurrences, self.config.batch_size)
            if not batch:
                logger.warning("Position database returned an empty batch, stopping")
                break

            self.train_batch(batch)
            self.network.save(self.config.checkpoint_path)

            metrics = self.evaluate(test)
            logger.info(
                f"Epoch {self.epoch}: policy_loss={metrics['policy_loss']:.4f}, "
                f"value_loss={metrics['value_loss']:.4f}"
            )
            self.epoch += 1

        return metrics
