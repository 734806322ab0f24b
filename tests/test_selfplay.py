"""Tests for playing games between engines."""

import chess
import pytest

from chester.search import GameTermination, MCTSConfig, MCTSEngine, RandomEvaluator, play_game


class ScriptedEngine:
    """Plays a fixed list of SAN moves, then the first legal move."""

    def __init__(self, sans: list[str]) -> None:
        self.sans = list(sans)

    @property
    def name(self) -> str:
        return "Scripted"

    def select_move(self, board: chess.Board) -> chess.Move | None:
        if self.sans:
            return board.parse_san(self.sans.pop(0))
        return next(iter(board.legal_moves), None)

    def reset(self) -> None:
        self.sans = []


class IllegalEngine(ScriptedEngine):
    def select_move(self, board: chess.Board) -> chess.Move | None:
        return chess.Move.from_uci("a1a8")


class TestPlayGame:
    """Tests for play_game."""

    def test_checkmate(self) -> None:
        record = play_game(ScriptedEngine(["f3", "g4"]), ScriptedEngine(["e5", "Qh4#"]))

        assert record.result == "0-1"
        assert record.termination is GameTermination.CHECKMATE
        assert record.moves == ["f2f3", "e7e5", "g2g4", "d8h4"]
        assert record.move_count == 4

    def test_max_plies(self) -> None:
        engine = MCTSEngine(RandomEvaluator(seed=0), MCTSConfig(num_iterations=5))
        record = play_game(engine, engine, max_plies=3)

        assert record.result == "*"
        assert record.termination is GameTermination.MAX_MOVES
        assert record.move_count == 3

    def test_stalemate_start(self) -> None:
        board = chess.Board("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        record = play_game(ScriptedEngine([]), ScriptedEngine([]), board=board)

        assert record.result == "1/2-1/2"
        assert record.termination is GameTermination.STALEMATE
        assert record.moves == []

    def test_board_not_modified(self) -> None:
        board = chess.Board()
        play_game(ScriptedEngine([]), ScriptedEngine([]), board=board, max_plies=2)
        assert board.fen() == chess.STARTING_FEN

    def test_illegal_move(self) -> None:
        with pytest.raises(RuntimeError):
            play_game(IllegalEngine([]), ScriptedEngine([]))

    def test_pgn(self) -> None:
        record = play_game(ScriptedEngine(["f3", "g4"]), ScriptedEngine(["e5", "Qh4#"]))
        pgn = record.to_pgn("A", "B")

        assert '[White "A"]' in pgn
        assert "1. f3 e5 2. g4 Qh4# 0-1" in pgn
