"""Rules-engine capability consumed by the search.

The search never inspects moves. Everything it needs from a game is a
position identity, a terminal status, the ordered successor states, and a
fixed-length feature encoding.
"""

from enum import Enum
from typing import Protocol, Self

import numpy as np


class Side(Enum):
    """A player of a two-player game."""

    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Side":
        """The other side."""
        return Side.BLACK if self is Side.WHITE else Side.WHITE


# All scores are expressed as the probability that this side wins.
REFERENCE_SIDE = Side.WHITE


class GameStatus(Enum):
    """Terminal status of a position."""

    ONGOING = "ongoing"
    WHITE_WON = "white_won"
    BLACK_WON = "black_won"
    DRAWN = "drawn"

    @property
    def is_terminal(self) -> bool:
        """Whether the game is over."""
        return self is not GameStatus.ONGOING

    @property
    def score(self) -> float | None:
        """Outcome from the reference side's perspective (None while ongoing)."""
        return _TERMINAL_SCORES.get(self)


_TERMINAL_SCORES = {
    GameStatus.WHITE_WON: 1.0,
    GameStatus.BLACK_WON: 0.0,
    # Deliberately 0.5 rather than 0.0, so a draw is neutral for both sides
    GameStatus.DRAWN: 0.5,
}


class GameState(Protocol):
    """A game position as seen by the search graph."""

    @property
    def side_to_move(self) -> Side:
        """The side whose turn it is."""
        ...

    def identity(self) -> int:
        """Deterministic fingerprint; equal positions give equal identities."""
        ...

    def status(self) -> GameStatus:
        """Whether the game is ongoing, won by a side, or drawn."""
        ...

    def successors(self) -> list[Self]:
        """States reachable in one legal move, in move-generation order."""
        ...

    def encode(self) -> np.ndarray:
        """Fixed-length float feature vector for the scoring network."""
        ...
