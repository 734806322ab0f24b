"""Tests for the training loop."""

import sqlite3
from pathlib import Path

import chess
import numpy as np
import pytest

from chester.core.configs import TrainingConfig
from chester.core.data import PositionDatabase, PositionRecord, encode_position
from chester.nn import PolicyValueNetwork
from chester.search import SearchGraph
from chester.training import Trainer
from tests.toy import ENCODING_WIDTH, ConstantEvaluator, ToyState


def _board(*sans: str) -> chess.Board:
    board = chess.Board()
    for san in sans:
        board.push_san(san)
    return board


@pytest.fixture
def network() -> PolicyValueNetwork:
    return PolicyValueNetwork.from_shape([8], [8, 4], rng=np.random.default_rng(7))


@pytest.fixture
def records() -> list[PositionRecord]:
    return [
        PositionRecord(_board(), wins=9, losses=1),
        PositionRecord(_board("e4"), wins=1, losses=3),
    ]


@pytest.fixture
def database(tmp_path: Path) -> Path:
    path = tmp_path / "chess.db"
    openings = [(), ("e4",), ("d4",), ("e4", "e5"), ("d4", "d5"), ("c4",)]
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE chess_moves (hash INTEGER, board TEXT, wins INTEGER, losses INTEGER)")
    conn.executemany(
        "INSERT INTO chess_moves VALUES (?, ?, ?, ?)",
        [(i, encode_position(_board(*line)), 3 + i, 4) for i, line in enumerate(openings)],
    )
    conn.commit()
    conn.close()
    return path


class TestTrainer:
    """Tests for Trainer."""

    def test_train_batch(self, network, records) -> None:
        trainer = Trainer(network, TrainingConfig(learning_rate=0.01))
        assert trainer.train_batch(records) == 2

    def test_training_reduces_loss(self, network, records) -> None:
        trainer = Trainer(network, TrainingConfig(learning_rate=0.05))
        before = trainer.evaluate(records[:1])

        for _ in range(20):
            trainer.train_batch(records[:1])
        after = trainer.evaluate(records[:1])

        assert after["value_loss"] < before["value_loss"]
        assert after["policy_loss"] < before["policy_loss"]

    def test_evaluate_empty(self, network) -> None:
        metrics = Trainer(network).evaluate([])
        assert np.isnan(metrics["policy_loss"])
        assert np.isnan(metrics["value_loss"])

    def test_train_from_graph(self, diamond) -> None:
        network = PolicyValueNetwork.from_shape(
            [4], [4], input_size=ENCODING_WIDTH, rng=np.random.default_rng(0)
        )
        graph = SearchGraph.from_position(ToyState(diamond, 0))
        for _ in range(10):
            graph.run_iteration(0, ConstantEvaluator(0.6), 2.0)

        trainer = Trainer(network, TrainingConfig(min_visits=2))

        assert trainer.train_from_graph(graph) == len(list(graph.training_data(2)))
        assert trainer.train_from_graph(graph, min_visits=0) == len(list(graph.training_data()))

    def test_fit(self, network, database: Path, tmp_path: Path) -> None:
        checkpoint = tmp_path / "out" / "network.json"
        config = TrainingConfig(
            learning_rate=0.01,
            batch_size=4,
            eval_size=3,
            eval_min_occurrences=0,
            checkpoint_path=checkpoint,
        )
        trainer = Trainer(network, config)

        with PositionDatabase(database, in_memory=True) as db:
            metrics = trainer.fit(db, epochs=2)

        assert trainer.epoch == 2
        assert checkpoint.exists()
        assert set(metrics) == {"policy_loss", "value_loss"}
        assert PolicyValueNetwork.load(checkpoint).input_size == network.input_size

    def test_fit_empty_database(self, network, database: Path, tmp_path: Path) -> None:
        config = TrainingConfig(min_occurrences=1000, checkpoint_path=tmp_path / "network.json")

        with PositionDatabase(database) as db:
            metrics = Trainer(network, config).fit(db, epochs=3)

        assert metrics == {}
        assert not (tmp_path / "network.json").exists()
