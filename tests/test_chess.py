"""Tests for the chess adapter and position encoding."""

import chess
import chess.polyglot
import numpy as np
import pytest

from chester.core.chess import ENCODING_SIZE, ChessState, bitboard_to_array, encode_board
from chester.core.chess.encoding import pinned_mask
from chester.core.game import GameStatus, Side


def _offset(plane: int, square: chess.Square) -> int:
    return 1 + plane * 64 + square


class TestChessState:
    """Tests for the GameState adapter."""

    def test_starting_position(self) -> None:
        state = ChessState()
        assert state.side_to_move is Side.WHITE
        assert state.status() is GameStatus.ONGOING
        assert len(state.successors()) == 20

    def test_successors_follow_moves(self) -> None:
        """successors()[i] is the position after moves()[i]."""
        state = ChessState.from_fen("r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3")
        for move, child in zip(state.moves(), state.successors()):
            board = state.board.copy()
            board.push(move)
            assert child.board.board_fen() == board.board_fen()
            assert child.side_to_move is Side.BLACK

    def test_successors_do_not_mutate(self) -> None:
        state = ChessState()
        state.successors()
        assert state.board.fen() == chess.STARTING_FEN

    def test_identity_is_zobrist(self) -> None:
        state = ChessState()
        assert state.identity() == chess.polyglot.zobrist_hash(chess.Board())

    def test_transposition_identity(self) -> None:
        """Move order does not change the identity."""
        a = chess.Board()
        for san in ("e4", "e5", "Nf3", "Nc6"):
            a.push_san(san)
        b = chess.Board()
        for san in ("Nf3", "Nc6", "e4", "e5"):
            b.push_san(san)

        assert ChessState(a).identity() == ChessState(b).identity()

    def test_side_changes_identity(self) -> None:
        white = ChessState.from_fen("4k3/8/8/8/8/8/8/4K2R w - - 0 1")
        black = ChessState.from_fen("4k3/8/8/8/8/8/8/4K2R b - - 0 1")
        assert white.identity() != black.identity()

    def test_checkmate(self) -> None:
        board = chess.Board()
        for san in ("f3", "e5", "g4", "Qh4#"):
            board.push_san(san)
        state = ChessState(board)

        assert state.status() is GameStatus.BLACK_WON
        assert state.status().score == 0.0
        assert state.successors() == []

    def test_stalemate(self) -> None:
        state = ChessState.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        assert state.status() is GameStatus.DRAWN
        assert state.status().score == 0.5

    def test_insufficient_material(self) -> None:
        state = ChessState.from_fen("8/8/8/4k3/8/8/8/4K3 w - - 0 1")
        assert state.status() is GameStatus.DRAWN

    def test_invalid_fen(self) -> None:
        with pytest.raises(ValueError):
            ChessState.from_fen("not a fen")


class TestEncoding:
    """Tests for the 1089-wide feature vector."""

    def test_width(self) -> None:
        features = encode_board(chess.Board())
        assert ENCODING_SIZE == 1089
        assert features.shape == (1089,)
        assert features.dtype == np.float64

    def test_side_flag(self) -> None:
        board = chess.Board()
        assert encode_board(board)[0] == 0.0
        board.push_san("e4")
        assert encode_board(board)[0] == 1.0

    def test_occupied_plane(self) -> None:
        features = encode_board(chess.Board())
        assert features[_offset(1, 0) : _offset(2, 0)].sum() == 32
        # Nobody is in check at the start
        assert features[_offset(0, 0) : _offset(1, 0)].sum() == 0

    def test_piece_planes(self) -> None:
        features = encode_board(chess.Board())
        # Plane 4 is the white king, plane 11 the black king
        assert features[_offset(4, chess.E1)] == 1.0
        assert features[_offset(11, chess.E8)] == 1.0
        # Planes 9 and 16 are the pawns
        assert features[_offset(9, 0) : _offset(10, 0)].sum() == 8
        assert features[_offset(16, 0) : _offset(17, 0)].sum() == 8

    def test_pinned_plane(self) -> None:
        board = chess.Board("k3r3/8/8/8/8/8/4N3/4K3 w - - 0 1")
        assert pinned_mask(board) == chess.BB_E2
        assert encode_board(board)[_offset(2, chess.E2)] == 1.0

    def test_checkers_plane(self) -> None:
        board = chess.Board("k3r3/8/8/8/8/8/8/4K3 w - - 0 1")
        assert encode_board(board)[_offset(0, chess.E8)] == 1.0

    def test_bitboard_to_array(self) -> None:
        assert bitboard_to_array(1)[0] == 1.0
        assert bitboard_to_array(1 << 63)[63] == 1.0
        assert bitboard_to_array(chess.BB_RANK_1).sum() == 8
        assert bitboard_to_array(0).shape == (64,)
