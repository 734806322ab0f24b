"""Chess rules adapter and feature encoding."""

from chester.core.chess.encoding import ENCODING_SIZE, bitboard_to_array, encode_board
from chester.core.chess.state import ChessState

__all__ = ["ENCODING_SIZE", "ChessState", "bitboard_to_array", "encode_board"]
