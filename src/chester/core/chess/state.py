"""Chess adapter for the search graph."""

from __future__ import annotations

import chess
import chess.polyglot
import numpy as np

from chester.core.chess.encoding import encode_board
from chester.core.game import GameStatus, Side


class ChessState:
    """A chess position implementing the `GameState` protocol.

    Successor boards are copied without their move stack, so two states that
    differ only in how they were reached are indistinguishable. Repetition
    draws are therefore not detected; the fifty-move counter still is.
    """

    __slots__ = ("board",)

    def __init__(self, board: chess.Board | None = None) -> None:
        self.board = board if board is not None else chess.Board()

    @classmethod
    def from_fen(cls, fen: str) -> ChessState:
        """Create a state from a FEN string (raises ValueError if malformed)."""
        return cls(chess.Board(fen))

    @property
    def side_to_move(self) -> Side:
        return Side.WHITE if self.board.turn == chess.WHITE else Side.BLACK

    def identity(self) -> int:
        """64-bit Polyglot Zobrist hash of the position."""
        return chess.polyglot.zobrist_hash(self.board)

    def status(self) -> GameStatus:
        outcome = self.board.outcome(claim_draw=False)
        if outcome is None:
            return GameStatus.ONGOING
        if outcome.winner is None:
            return GameStatus.DRAWN
        return GameStatus.WHITE_WON if outcome.winner == chess.WHITE else GameStatus.BLACK_WON

    def moves(self) -> list[chess.Move]:
        """Legal moves, in the same order as `successors()`."""
        return list(self.board.legal_moves)

    def successors(self) -> list[ChessState]:
        children = []
        for move in self.board.legal_moves:
            board = self.board.copy(stack=False)
            board.push(move)
            children.append(ChessState(board))
        return children

    def encode(self) -> np.ndarray:
        return encode_board(self.board)

    def __repr__(self) -> str:
        return f"ChessState({self.board.fen()!r})"
