"""Play games between engines.

Games are played to the end by the rules (no adjudication) or until a ply
limit is reached, in which case the result is "*".
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

import chess
from loguru import logger


class Engine(Protocol):
    """Anything that can take a turn in `play_game`.

    `select_move` must leave the board untouched and return None only when
    there is no legal move. `MCTSEngine` qualifies.
    """

    @property
    def name(self) -> str: ...

    def select_move(self, board: chess.Board) -> chess.Move | None: ...


class GameTermination(Enum):
    """How a game ended."""

    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    SEVENTYFIVE_MOVES = "seventyfive_moves"
    FIVEFOLD_REPETITION = "fivefold_repetition"
    MAX_MOVES = "max_moves"


@dataclass
class GameRecord:
    """A finished (or truncated) game."""

    opening_fen: str
    moves: list[str]  # UCI
    result: str  # "1-0", "0-1", "1/2-1/2" or "*"
    termination: GameTermination
    final_fen: str

    move_count: int = field(init=False)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self) -> None:
        self.move_count = len(self.moves)

    def to_pgn(self, white: str = "White", black: str = "Black", event: str = "Self-play") -> str:
        """Generate a PGN string for this game."""
        lines = [
            f'[Event "{event}"]',
            f'[Date "{datetime.now().strftime("%Y.%m.%d")}"]',
            f'[White "{white}"]',
            f'[Black "{black}"]',
            f'[Result "{self.result}"]',
            f'[FEN "{self.opening_fen}"]',
            '[SetUp "1"]',
            f'[Termination "{self.termination.value}"]',
            "",
        ]

        board = chess.Board(self.opening_fen)
        parts = []
        for uci in self.moves:
            move = chess.Move.from_uci(uci)
            if board.turn == chess.WHITE:
                parts.append(f"{board.fullmove_number}.")
            elif not parts:
                parts.append(f"{board.fullmove_number}...")
            parts.append(board.san(move))
            board.push(move)

        parts.append(self.result)
        lines.append(" ".join(parts))
        lines.append("")
        return "\n".join(lines)


def play_game(
    white: Engine,
    black: Engine,
    board: chess.Board | None = None,
    max_plies: int = 200,
) -> GameRecord:
    """Play one game and return its record.

    Args:
        white: Engine moving for white.
        black: Engine moving for black.
        board: Starting position (not modified). Defaults to the initial position.
        max_plies: Stop after this many half-moves.

    Returns:
        The game record.
    """
    board = board.copy() if board is not None else chess.Board()
    opening_fen = board.fen()
    moves: list[str] = []

    while True:
        outcome = board.outcome(claim_draw=False)
        if outcome is not None:
            termination = GameTermination(outcome.termination.name.lower())
            logger.info(f"Game over after {len(moves)} plies: {outcome.result()} ({termination.value})")
            return GameRecord(opening_fen, moves, outcome.result(), termination, board.fen())

        if len(moves) >= max_plies:
            logger.info(f"Stopped after {max_plies} plies")
            return GameRecord(opening_fen, moves, "*", GameTermination.MAX_MOVES, board.fen())

        engine = white if board.turn == chess.WHITE else black
        move = engine.select_move(board)
        if move is None or move not in board.legal_moves:
            msg = f"{engine.name} returned an illegal move {move} in {board.fen()}"
            raise RuntimeError(msg)

        logger.debug(f"{engine.name}: {board.san(move)}")
        moves.append(move.uci())
        board.push(move)
