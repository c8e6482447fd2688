"""Logging configuration for tasklane with custom verbosity levels."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

# Define custom levels between standard logging levels
CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30) - for verbosity level 1
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20) - for verbosity level 2

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0  # Errors and row warnings
VERBOSITY_CHANGES = 1  # Import summaries
VERBOSITY_CHECKS = 2  # Per-row and per-task decisions
VERBOSITY_DEBUG = 3  # Full algorithm details

_LEVEL_MAP = {
    VERBOSITY_SILENT: logging.WARNING,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}


class TasklaneLogger(logging.Logger):
    """Logger with semantic verbosity methods.

    - changes(): verbosity level 1 - import summaries, derived view sizes
    - checks(): verbosity level 2 - per-row and per-task decisions
    - debug(): verbosity level 3 - traversal details
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log changes (verbosity level 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log checks (verbosity level 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> TasklaneLogger:
    """Get the tasklane logger instance (singleton).

    Use setup_logger() to configure it before first use.
    """
    logging.setLoggerClass(TasklaneLogger)
    try:
        logger = logging.getLogger("tasklane")
    finally:
        logging.setLoggerClass(logging.Logger)
    assert isinstance(logger, TasklaneLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the tasklane logger with a verbosity level.

    Can be called multiple times to reconfigure the logger.

    Args:
        verbosity: 0=warnings only, 1=changes, 2=checks, 3=debug
        stream: Optional output stream (defaults to sys.stderr, useful for testing)
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_MAP.get(verbosity, logging.WARNING))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Reset the logger to a clean state between tests."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True


def checks_enabled() -> bool:
    """Check if checks-level logging is enabled (verbosity >= 2)."""
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    """Check if debug-level logging is enabled (verbosity >= 3)."""
    return get_logger().isEnabledFor(logging.DEBUG)
