"""
Logging setup for applications embedding outing_core.

The library itself only creates module loggers under the "outing_core"
namespace; hosts call setup_logging() to get console (and file) output.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

LOGGER_NAME = "outing_core"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Marks handlers installed here, so a repeated call only replaces its own
_OWNED = "_outing_core_handler"


def _owned_handlers(logger: logging.Logger) -> List[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _OWNED, False)]


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Attaches console (and optionally file) handlers to the outing_core logger.

    Calling it again swaps the handlers from the previous call. Handlers the
    host attached itself are left alone.

    Args:
        log_level: Level name, case-insensitive (DEBUG, INFO, ...)
        log_file: Optional log file path; parent directories are created

    Raises:
        ValueError: If the level name is unknown.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
        logger.addHandler(handler)

    return logger
