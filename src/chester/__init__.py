"""chester: transposition-aware MCTS guided by a hand-rolled scoring network.

- `from chester.search import SearchGraph, MCTSEngine`
- `from chester.nn import Layer, PolicyValueNetwork`
- `from chester.core import setup_logging, load_config`
"""

__version__ = "0.1.0"

from chester.core import load_config, save_config, setup_logging
from chester.nn import Layer, PolicyValueNetwork
from chester.search import MCTSEngine, SearchGraph

__all__ = [
    "Layer",
    "MCTSEngine",
    "PolicyValueNetwork",
    "SearchGraph",
    "__version__",
    "load_config",
    "save_config",
    "setup_logging",
]
