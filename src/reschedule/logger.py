"""Levelled logging for reschedule.

Propagation runs report what they do at three verbosity levels:

- 1 (CHANGES): every item whose dates were altered
- 2 (CHECKS): every item visited and the rule chosen for it
- 3 (DEBUG): dependency facts (floors, envelopes, deltas)
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from typing import Any, TextIO

CHANGES_LEVEL = 25  # Between INFO and WARNING
CHECKS_LEVEL = 15  # Between DEBUG and INFO

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

_LEVEL_BY_VERBOSITY = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}

LOGGER_NAME = "reschedule"


class RescheduleLogger(logging.Logger):
    """Logger with one method per verbosity level."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an altered item (verbosity 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a visited item or rule decision (verbosity 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> RescheduleLogger:
    """Return the package logger singleton.

    Call setup_logger() first to attach a handler; until then only errors
    reach the root logger.
    """
    logging.setLoggerClass(RescheduleLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, RescheduleLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the package logger for a verbosity level.

    Safe to call repeatedly; existing handlers are replaced.

    Args:
        verbosity: 0=silent (errors only), 1=changes, 2=checks, 3=debug
        stream: Output stream, defaults to sys.stderr
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_BY_VERBOSITY.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to silent mode (used by tests)."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def changes_enabled() -> bool:
    """True when CHANGES messages will be emitted."""
    return get_logger().isEnabledFor(CHANGES_LEVEL)


def checks_enabled() -> bool:
    """True when CHECKS messages will be emitted."""
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    """True when DEBUG messages will be emitted."""
    return get_logger().isEnabledFor(logging.DEBUG)


def format_span(start_date: date | None, due_date: date | None) -> str:
    """Render a date pair for log lines, e.g. ``2024-01-01..2024-01-03``."""
    start = start_date.isoformat() if start_date else "?"
    due = due_date.isoformat() if due_date else "?"
    return f"{start}..{due}"
