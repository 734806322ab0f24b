"""Strongly-typed configuration schemas for chester.

These dataclasses provide validation, IDE support, and serve as the
single source of truth for all configuration options.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from chester.search.config import MCTSConfig


@dataclass
class NetworkConfig:
    """Configuration for the policy/value network pair."""

    input_size: int = 1089  # Width of the chess position encoding
    policy_shape: list[int] = field(default_factory=lambda: [500, 250, 100])
    value_shape: list[int] = field(default_factory=lambda: [750, 500, 250, 100, 10])
    policy_scale: float = 0.3
    value_scale: float = 0.4
    path: str | None = None  # Load weights from here instead of initializing
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate head shapes."""
        for name, shape in (("policy_shape", self.policy_shape), ("value_shape", self.value_shape)):
            if not shape:
                msg = f"{name} must contain at least one hidden width"
                raise ValueError(msg)
            if any(width <= 0 for width in shape):
                msg = f"{name} widths must be positive, got {list(shape)}"
                raise ValueError(msg)


@dataclass
class TrainingConfig:
    """Configuration for the training loop."""

    learning_rate: float = 0.008
    epochs: int = 1
    batch_size: int = 2000
    eval_size: int = 64
    min_occurrences: int = 0  # Train on positions seen in more than this many games
    eval_min_occurrences: int = 5
    min_visits: int = 0  # Search statistics threshold for training_data
    checkpoint_path: Path = field(default_factory=lambda: Path("network.json"))

    def __post_init__(self) -> None:
        """Convert string to Path if needed."""
        if isinstance(self.checkpoint_path, str):
            self.checkpoint_path = Path(self.checkpoint_path)


@dataclass
class DataConfig:
    """Configuration for the position database."""

    database_path: str = "chess.db"
    in_memory: bool = True  # Copy the database into memory before sampling


@dataclass
class ExperimentConfig:
    """Top-level configuration combining all sub-configs."""

    network: NetworkConfig = field(default_factory=NetworkConfig)
    search: MCTSConfig = field(default_factory=MCTSConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    data: DataConfig = field(default_factory=DataConfig)

    seed: int = 42


def config_from_dict(data: dict[str, Any]) -> ExperimentConfig:
    """Create ExperimentConfig from a dictionary (e.g., from OmegaConf).

    Args:
        data: Dictionary with configuration values.

    Returns:
        ExperimentConfig instance.
    """
    return ExperimentConfig(
        network=NetworkConfig(**data.get("network", {})),
        search=MCTSConfig(**data.get("search", {})),
        training=TrainingConfig(**data.get("training", {})),
        data=DataConfig(**data.get("data", {})),
        seed=data.get("seed", 42),
    )


def config_to_dict(config: ExperimentConfig) -> dict[str, Any]:
    """Convert ExperimentConfig to a dictionary for serialization.

    Args:
        config: ExperimentConfig instance.

    Returns:
        Dictionary representation.
    """
    result = asdict(config)
    # Plain values for YAML serialization
    result["training"]["checkpoint_path"] = str(result["training"]["checkpoint_path"])
    result["search"]["leaf_evaluation"] = config.search.leaf_evaluation.value
    return result
