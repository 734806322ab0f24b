"""Pytest configuration and shared fixtures."""

import pytest

from chester.core.game import GameStatus
from tests.toy import B, W, ToyPosition


@pytest.fixture
def diamond() -> dict[int, ToyPosition]:
    """Two move orders (0-1-3 and 0-2-3) reaching the same position 3.

        0 (W) -> 1 (B), 2 (B)
        1, 2  -> 3 (W)
        3     -> 4 (B, white won), 5 (B, drawn)
    """
    return {
        0: ToyPosition(W, (1, 2)),
        1: ToyPosition(B, (3,)),
        2: ToyPosition(B, (3,)),
        3: ToyPosition(W, (4, 5)),
        4: ToyPosition(B, status=GameStatus.WHITE_WON),
        5: ToyPosition(B, status=GameStatus.DRAWN),
    }


@pytest.fixture
def cycle() -> dict[int, ToyPosition]:
    """A repetition: 0 -> 1 -> 0."""
    return {
        0: ToyPosition(W, (1,)),
        1: ToyPosition(B, (0,)),
    }


@pytest.fixture
def mate_in_one() -> dict[int, ToyPosition]:
    """White to move with one winning and one quiet reply."""
    return {
        0: ToyPosition(W, (1, 2)),
        1: ToyPosition(B, status=GameStatus.WHITE_WON),
        2: ToyPosition(B, (3,)),
        3: ToyPosition(W, (2,)),
    }
