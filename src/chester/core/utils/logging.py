"""Logging configuration for chester.

Records from the search internals (`chester.search`) can be given their own
threshold, so per-iteration debug output can be switched on without
flooding the log with everything else.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

SEARCH_MODULE = "chester.search"


def _threshold_filter(level: str, search_level: str | None) -> Callable[[dict[str, Any]], bool]:
    minimum = logger.level(level).no
    search_minimum = logger.level(search_level).no if search_level else minimum

    def accept(record: dict[str, Any]) -> bool:
        name = record["name"] or ""
        threshold = search_minimum if name.startswith(SEARCH_MODULE) else minimum
        return record["level"].no >= threshold

    return accept


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    search_level: str | None = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """Configure loguru for chester.

    Args:
        level: Minimum log level to display.
        log_file: Optional path to a log file.
        search_level: Minimum level for `chester.search` records. Defaults to `level`.
        rotation: When to rotate the log file.
        retention: How long to keep old log files.
    """
    level = level.upper()
    search_level = search_level.upper() if search_level else None
    accept = _threshold_filter(level, search_level)

    logger.remove()

    logger.add(
        sys.stderr,
        level=0,
        filter=accept,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=0,
            filter=accept,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    logger.info(f"Logging at {level}" + (f", search at {search_level}" if search_level else ""))
