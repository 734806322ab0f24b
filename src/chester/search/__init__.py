"""Transposition-aware Monte-Carlo Tree Search."""

from chester.search.config import LeafEvaluation, MCTSConfig
from chester.search.evaluator import Evaluator, RandomEvaluator
from chester.search.node import PositionNode
from chester.search.graph import SearchGraph, UnknownPositionError
from chester.search.engine import MCTSEngine
from chester.search.selfplay import Engine, GameRecord, GameTermination, play_game

__all__ = [
    "Engine",
    "Evaluator",
    "GameRecord",
    "GameTermination",
    "LeafEvaluation",
    "MCTSConfig",
    "MCTSEngine",
    "PositionNode",
    "RandomEvaluator",
    "SearchGraph",
    "UnknownPositionError",
    "play_game",
]
