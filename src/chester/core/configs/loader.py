"""Loading and saving experiment configurations.

An experiment configuration is built in layers, each merged with OmegaConf
over the previous one:

    1. ExperimentConfig defaults
    2. an optional YAML file (e.g. configs/base.yaml)
    3. dotlist overrides from the command line (e.g. search.num_iterations=400)

The merged tree is then turned into the typed schema, which validates it.
"""

from pathlib import Path
from typing import Any

from loguru import logger
from omegaconf import DictConfig, OmegaConf

from chester.core.configs.schema import ExperimentConfig, config_from_dict, config_to_dict


def load_config(
    config_path: str | Path | None = None,
    overrides: list[str] | None = None,
) -> ExperimentConfig:
    """Build an ExperimentConfig from defaults, a YAML file and overrides.

    Args:
        config_path: YAML file layered over the defaults. None uses the
            defaults alone.
        overrides: Dotlist overrides applied last.

    Returns:
        The validated experiment configuration.

    Raises:
        FileNotFoundError: If `config_path` is given but does not exist.
        ValueError: If a section holds an unknown option or an invalid value.
    """
    merged = OmegaConf.create(config_to_dict(ExperimentConfig()))

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)
        merged = OmegaConf.merge(merged, OmegaConf.load(config_path))
        logger.debug(f"Loaded config from {config_path}")

    if overrides:
        merged = OmegaConf.merge(merged, OmegaConf.from_dotlist(overrides))
        logger.debug(f"Applied overrides: {overrides}")

    data = OmegaConf.to_container(merged, resolve=True)
    try:
        return config_from_dict(data)  # type: ignore[arg-type]
    except TypeError as e:
        # Dataclass constructors reject unknown keyword arguments
        msg = f"Invalid configuration: {e}"
        raise ValueError(msg) from e


def save_config(config: ExperimentConfig | DictConfig | dict[str, Any], path: str | Path) -> None:
    """Write a configuration as YAML, creating parent directories.

    Args:
        config: Experiment configuration, or a plain/OmegaConf tree.
        path: Destination file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(config, ExperimentConfig):
        config = config_to_dict(config)
    if isinstance(config, dict):
        config = OmegaConf.create(config)

    OmegaConf.save(config, path)
