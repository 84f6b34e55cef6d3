"""Library-wide logging with level filtering.

The active logger can be replaced with :func:`set_logger`; passing ``None``
disables logging entirely.
"""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import Any, TextIO

_REQUIRED_METHODS = ("debug", "info", "warn", "error")


class LogLevel(enum.IntEnum):
    """Logging levels; each level also logs every level below it."""

    ERROR = 0
    WARNING = 1
    INFO = 2
    DEBUG = 3


@dataclass
class Logger:
    """Default logger writing ``<prefix> <marker> <message>`` lines to a stream.

    When ``stream`` is ``None`` messages go to ``sys.stderr``. Messages with
    extra arguments are formatted with the ``%`` operator.
    """

    prefix: str = "influxdb2client"
    log_level: int = LogLevel.ERROR
    stream: TextIO | None = None

    def debug(self, msg: str, *args: Any) -> None:
        """Write a debug message if the debug level is enabled."""
        if self.log_level >= LogLevel.DEBUG:
            self._emit("D!", msg, args)

    def info(self, msg: str, *args: Any) -> None:
        """Write an info message if the info level is enabled."""
        if self.log_level >= LogLevel.INFO:
            self._emit("I!", msg, args)

    def warn(self, msg: str, *args: Any) -> None:
        """Write a warning message if the warning level is enabled."""
        if self.log_level >= LogLevel.WARNING:
            self._emit("W!", msg, args)

    def error(self, msg: str, *args: Any) -> None:
        """Write an error message; errors are always written."""
        self._emit("E!", msg, args)

    def _emit(self, marker: str, msg: str, args: tuple[Any, ...]) -> None:
        text = msg % args if args else msg
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(f"{self.prefix} {marker} {text}\n")


class _ActiveLogger:
    """Holds the logger currently used by the library."""

    def __init__(self, logger: Any) -> None:
        self.logger = logger


_active = _ActiveLogger(Logger())


def set_logger(logger: Any) -> Any:
    """Install the library-wide logger and return the previous one.

    ``None`` disables logging. Any other object must provide callable
    ``debug``, ``info``, ``warn`` and ``error`` methods.
    """
    if logger is not None:
        missing = [name for name in _REQUIRED_METHODS if not callable(getattr(logger, name, None))]
        if missing:
            raise TypeError(f"logger lacks methods: {', '.join(missing)}")
    previous = _active.logger
    _active.logger = logger
    return previous


def get_logger() -> Any:
    """Return the library-wide logger, or ``None`` if logging is disabled."""
    return _active.logger


def debug(msg: str, *args: Any) -> None:
    """Send a debug message to the active logger."""
    if _active.logger is not None:
        _active.logger.debug(msg, *args)


def info(msg: str, *args: Any) -> None:
    """Send an info message to the active logger."""
    if _active.logger is not None:
        _active.logger.info(msg, *args)


def warn(msg: str, *args: Any) -> None:
    """Send a warning message to the active logger."""
    if _active.logger is not None:
        _active.logger.warn(msg, *args)


def error(msg: str, *args: Any) -> None:
    """Send an error message to the active logger."""
    if _active.logger is not None:
        _active.logger.error(msg, *args)


def level() -> int:
    """Return the active logger's level, or ``ERROR`` when logging is disabled."""
    if _active.logger is not None:
        return _active.logger.log_level
    return LogLevel.ERROR