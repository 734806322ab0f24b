"""SQLite-backed store of historical positions."""

import sqlite3
from pathlib import Path
from types import TracebackType

from loguru import logger

from chester.core.data.records import PositionRecord, PositionRecordError

_BATCH_QUERY = """
    SELECT board, wins, losses FROM chess_moves
    WHERE wins + losses > ?
    ORDER BY RANDOM() LIMIT ?
"""

_COUNT_QUERY = "SELECT COUNT(*) FROM chess_moves WHERE wins + losses > ?"


class PositionDatabase:
    """Read-only access to a `chess_moves(hash, board, wins, losses)` table.

    Example:
        with PositionDatabase("chess.db", in_memory=True) as db:
            batch = db.get_batch(min_occurrences=5, size=64)
    """

    def __init__(self, path: str | Path, *, in_memory: bool = False) -> None:
        """Open the database.

        Args:
            path: SQLite database file.
            in_memory: Copy the whole database into memory first. Random
                sampling is much faster afterwards.
        """
        path = Path(path)
        if not path.exists():
            msg = f"Position database not found: {path}"
            raise FileNotFoundError(msg)

        self.path = path
        conn = sqlite3.connect(path)
        if in_memory:
            memory = sqlite3.connect(":memory:")
            conn.backup(memory)
            conn.close()
            conn = memory
            logger.debug(f"Loaded {path} into memory")
        self._conn = conn

    def count(self, min_occurrences: int = 0) -> int:
        """Number of positions seen in more than `min_occurrences` games."""
        (total,) = self._conn.execute(_COUNT_QUERY, (min_occurrences,)).fetchone()
        return total

    def get_batch(self, min_occurrences: int, size: int) -> list[PositionRecord]:
        """Sample up to `size` random positions seen in more than `min_occurrences` games.

        Rows whose board cannot be decoded are skipped.
        """
        rows = self._conn.execute(_BATCH_QUERY, (min_occurrences, size)).fetchall()

        records = []
        for text, wins, losses in rows:
            try:
                records.append(PositionRecord.from_text(text, wins, losses))
            except PositionRecordError as e:
                logger.warning(f"Skipping undecodable position: {e}")

        return records

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "PositionDatabase":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
