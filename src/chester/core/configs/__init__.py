"""Configuration management utilities."""

from chester.core.configs.loader import load_config, save_config
from chester.core.configs.schema import (
    DataConfig,
    ExperimentConfig,
    NetworkConfig,
    TrainingConfig,
    config_from_dict,
    config_to_dict,
)

__all__ = [
    "DataConfig",
    "ExperimentConfig",
    "NetworkConfig",
    "TrainingConfig",
    "config_from_dict",
    "config_to_dict",
    "load_config",
    "save_config",
]
