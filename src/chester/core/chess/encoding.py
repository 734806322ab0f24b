"""Feature encoding of chess positions.

A position is encoded as 1089 floats: one side-to-move flag followed by
17 bitboards of 64 squares each. Bit `i` of a bitboard (square `i` in
python-chess numbering, a1 = 0, h8 = 63) lands at offset `i` of its block.

Block order:
    checkers, occupied, pinned (side to move),
    white pieces, white K Q R B N P,
    black pieces, black K Q R B N P
"""

import chess
import numpy as np

NUM_PLANES = 17
ENCODING_SIZE = 1 + NUM_PLANES * 64

_PIECE_ORDER = (chess.KING, chess.QUEEN, chess.ROOK, chess.BISHOP, chess.KNIGHT, chess.PAWN)


def bitboard_to_array(mask: int) -> np.ndarray:
    """Expand a 64-bit square mask into a 0/1 float vector of length 64."""
    raw = np.frombuffer(int(mask).to_bytes(8, "little"), dtype=np.uint8)
    return np.unpackbits(raw, bitorder="little").astype(np.float64)


def pinned_mask(board: chess.Board) -> int:
    """Squares of the side to move's pieces that are absolutely pinned."""
    mask = 0
    for square in chess.SquareSet(board.occupied_co[board.turn]):
        if board.is_pinned(board.turn, square):
            mask |= chess.BB_SQUARES[square]
    return mask


def _color_planes(board: chess.Board, color: chess.Color) -> list[int]:
    planes = [board.occupied_co[color]]
    planes.extend(board.pieces_mask(piece_type, color) for piece_type in _PIECE_ORDER)
    return planes


def encode_board(board: chess.Board) -> np.ndarray:
    """Encode a board into the network's input vector.

    Args:
        board: Position to encode.

    Returns:
        Float64 array of shape (ENCODING_SIZE,).
    """
    planes = [int(board.checkers()), board.occupied, pinned_mask(board)]
    planes.extend(_color_planes(board, chess.WHITE))
    planes.extend(_color_planes(board, chess.BLACK))

    side = np.array([0.0 if board.turn == chess.WHITE else 1.0])
    return np.concatenate([side, *(bitboard_to_array(mask) for mask in planes)])
