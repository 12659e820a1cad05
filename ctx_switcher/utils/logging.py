"""
structlog setup for the ctx command line.
Path: ctx_switcher/utils/logging.py

stdout is reserved for command output (prompt, list, dump), so log lines
always go to stderr.
"""

import logging
import os
import sys
from typing import Optional, Union

import structlog

# Silent unless asked for: stderr is shared with the user's interactive shell.
DEFAULT_LEVEL = "CRITICAL"
LOG_LEVEL_ENV = "CTX_LOG_LEVEL"

_configured = False


def _level_number(level: Union[str, int, None]) -> int:
    if isinstance(level, int):
        return level
    name = (level or DEFAULT_LEVEL).upper()
    number = logging.getLevelName(name)
    if not isinstance(number, int):
        return logging.getLevelName(DEFAULT_LEVEL)
    return number


def initialize_logging_config(level: Optional[Union[str, int]] = None, force: bool = False) -> None:
    """
    Configure structlog once per process.

    Args:
        level: Level name or number; falls back to $CTX_LOG_LEVEL, then CRITICAL
        force: Reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(**initial_values):
    """Return a structlog logger, configuring defaults on first use."""
    initialize_logging_config()
    return structlog.get_logger(**initial_values)
