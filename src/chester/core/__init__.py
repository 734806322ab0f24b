"""Core utilities shared by the search, the network and the drivers."""

from chester.core.configs import load_config, save_config
from chester.core.utils.logging import setup_logging

__all__ = ["load_config", "save_config", "setup_logging"]
