"""Compact position records.

A record stores a board as 64 bytes, base64-encoded, together with the number
of games won and lost from that position. Bytes are stored in reverse square
order: byte `63 - idx` describes square `7 - idx % 8 + 8 * (idx // 8)`, i.e.
the buffer runs from a8 across to h8 and down to h1.

Byte layout:
    bits 0-3  piece code (0 empty, 1 pawn, 2 rook, 3 knight, 4 bishop,
              5 queen, 6 king)
    bit 6     set on every byte unless the byte holds a piece of the side
              to move and that side is black
    bit 7     piece is white

Castling rights and en passant squares are not stored.
"""

import base64
import binascii
from dataclasses import dataclass

import chess
import numpy as np

from chester.core.chess import ChessState, encode_board

RECORD_BYTES = 64

_WHITE_BIT = 0b1000_0000
_MARKER_BIT = 0b0100_0000
_CODE_MASK = 0b0000_1111

_CODE_TO_PIECE = {
    1: chess.PAWN,
    2: chess.ROOK,
    3: chess.KNIGHT,
    4: chess.BISHOP,
    5: chess.QUEEN,
    6: chess.KING,
}
_PIECE_TO_CODE = {piece: code for code, piece in _CODE_TO_PIECE.items()}


class PositionRecordError(ValueError):
    """Raised when a position record cannot be decoded."""

    pass


def _square_for(idx: int) -> chess.Square:
    return 7 - (idx % 8) + 8 * (idx // 8)


def position_from_bytes(buf: bytes) -> chess.Board:
    """Decode a 64-byte board buffer.

    Raises:
        PositionRecordError: If the buffer has the wrong length, holds an
            unknown piece code, or describes an illegal position.
    """
    if len(buf) != RECORD_BYTES:
        msg = f"Position record must be {RECORD_BYTES} bytes, got {len(buf)}"
        raise PositionRecordError(msg)

    board = chess.Board(None)
    turn = chess.WHITE

    for idx, byte in enumerate(reversed(buf)):
        code = byte & _CODE_MASK
        if code == 0:
            continue
        if code not in _CODE_TO_PIECE:
            msg = f"Unknown piece code {code} at byte {RECORD_BYTES - 1 - idx}"
            raise PositionRecordError(msg)

        white = bool(byte & _WHITE_BIT)
        if not white and not byte & _MARKER_BIT:
            turn = chess.BLACK

        board.set_piece_at(_square_for(idx), chess.Piece(_CODE_TO_PIECE[code], white))

    board.turn = turn

    if not board.is_valid():
        msg = f"Decoded position is not legal: {board.fen()} ({board.status()!r})"
        raise PositionRecordError(msg)

    return board


def position_to_bytes(board: chess.Board) -> bytes:
    """Encode a board into the 64-byte record layout."""
    black_marker = 0 if board.turn == chess.BLACK else _MARKER_BIT
    buf = bytearray(RECORD_BYTES)

    for idx in range(RECORD_BYTES):
        piece = board.piece_at(_square_for(idx))
        if piece is None:
            byte = _MARKER_BIT
        elif piece.color == chess.WHITE:
            byte = _WHITE_BIT | _PIECE_TO_CODE[piece.piece_type]
        else:
            byte = black_marker | _PIECE_TO_CODE[piece.piece_type]
        buf[RECORD_BYTES - 1 - idx] = byte

    return bytes(buf)


def decode_position(text: str) -> chess.Board:
    """Decode a base64 position record into a board."""
    try:
        buf = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        msg = f"Position record is not valid base64: {text!r}"
        raise PositionRecordError(msg) from e
    return position_from_bytes(buf)


def encode_position(board: chess.Board) -> str:
    """Encode a board as a base64 position record."""
    return base64.b64encode(position_to_bytes(board)).decode("ascii")


@dataclass
class PositionRecord:
    """A stored position with its accumulated game results.

    Attributes:
        board: The decoded position.
        wins: Games won (by white) from this position.
        losses: Games lost (by white) from this position.
    """

    board: chess.Board
    wins: int
    losses: int

    @classmethod
    def from_text(cls, text: str, wins: int, losses: int) -> "PositionRecord":
        """Build a record from its base64 board and result counts."""
        return cls(board=decode_position(text), wins=wins, losses=losses)

    @property
    def games(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        """Fraction of games won: wins / (wins + losses)."""
        if self.games == 0:
            msg = "Win rate is undefined for a position with no recorded games"
            raise PositionRecordError(msg)
        return self.wins / self.games

    @property
    def targets(self) -> tuple[float, float]:
        """Two-class training target (win rate, loss rate)."""
        w = self.win_rate
        return w, 1.0 - w

    @property
    def state(self) -> ChessState:
        return ChessState(self.board)

    def encode(self) -> np.ndarray:
        """Network input for this position."""
        return encode_board(self.board)
