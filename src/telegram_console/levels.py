"""Log levels and their total order.

The four levels mirror the console methods they were named after:
log < info < warn < error. Filtering compares levels with the usual
operators, so ``LogLevel.WARN >= LogLevel.INFO`` is True.
"""

from __future__ import annotations

__all__ = [
    "LogLevel",
    "level_from_stdlib",
    "parse_level",
]

import logging
from enum import Enum
from typing import Any


class LogLevel(str, Enum):
    """Severity of a log record, totally ordered for filtering.

    Values are the lowercase names used in config files and the CLI.
    Comparison uses severity rank, not string order.
    """

    LOG = "log"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @property
    def label(self) -> str:
        """Uppercase name used in the message header (``[WARN]``)."""
        return self.value.upper()

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank >= other.rank


_RANK: dict[LogLevel, int] = {
    LogLevel.LOG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}

# Accepted spellings besides the canonical values
_ALIASES: dict[str, LogLevel] = {
    "debug": LogLevel.LOG,
    "warning": LogLevel.WARN,
    "critical": LogLevel.ERROR,
}


def parse_level(value: LogLevel | str) -> LogLevel:
    """Convert a level name to LogLevel.

    Case-insensitive. Accepts the stdlib spellings ``debug``, ``warning``
    and ``critical`` as aliases.

    Args:
        value: LogLevel or level name.

    Returns:
        The matching LogLevel.

    Raises:
        ValueError: If the name is not a known level.
    """
    if isinstance(value, LogLevel):
        return value
    name = str(value).strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return LogLevel(name)
    except ValueError:
        valid = ", ".join(level.value for level in LogLevel)
        raise ValueError(f"Unknown log level {value!r} (expected one of: {valid})") from None


def level_from_stdlib(levelno: int) -> LogLevel:
    """Map a stdlib logging level number onto LogLevel.

    DEBUG and below -> log, INFO -> info, WARNING -> warn,
    ERROR and CRITICAL -> error. Custom levels fall into the
    bucket of the nearest standard level below them.
    """
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    return LogLevel.LOG
