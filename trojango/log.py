"""Process-wide logging front end that forwards to a pluggable logger."""

from __future__ import annotations

import enum
import re
import sys
from typing import Any, Protocol, runtime_checkable


class LogLevel(enum.IntEnum):
    """How much to log: ALL logs everything, OFF nothing."""

    ALL = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    OFF = 5


_VERB = re.compile(r"%[+#]?v")


def _sprintf(fmt: str, args: tuple) -> str:
    fmt = _VERB.sub("%s", fmt)
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError):
        return fmt + " " + " ".join(str(a) for a in args)


def _sprintln(args: tuple) -> str:
    return " ".join(str(a) for a in args) + "\n"


@runtime_checkable
class Logger(Protocol):
    """What a logger backend provides."""

    def fatal(self, *args: Any) -> None: ...
    def fatalf(self, fmt: str, *args: Any) -> None: ...
    def error(self, *args: Any) -> None: ...
    def errorf(self, fmt: str, *args: Any) -> None: ...
    def warn(self, *args: Any) -> None: ...
    def warnf(self, fmt: str, *args: Any) -> None: ...
    def info(self, *args: Any) -> None: ...
    def infof(self, fmt: str, *args: Any) -> None: ...
    def debug(self, *args: Any) -> None: ...
    def debugf(self, fmt: str, *args: Any) -> None: ...
    def trace(self, *args: Any) -> None: ...
    def tracef(self, fmt: str, *args: Any) -> None: ...
    def set_log_level(self, level: LogLevel | int) -> None: ...
    def set_output(self, out: Any) -> None: ...


class EmptyLogger:
    """Drops every message, counting them; fatal messages still end the process."""

    def __init__(self) -> None:
        self.log_level = LogLevel.ALL
        self.output: Any = None
        self.discarded = 0

    def _discard(self) -> None:
        self.discarded += 1

    def set_log_level(self, level: LogLevel | int) -> None:
        self.log_level = LogLevel(level)

    def set_output(self, out: Any) -> None:
        self.output = out

    def fatal(self, *args: Any) -> None:
        self._discard()
        sys.exit(1)

    def fatalf(self, fmt: str, *args: Any) -> None:
        self._discard()
        sys.exit(1)

    def error(self, *args: Any) -> None:
        self._discard()

    def errorf(self, fmt: str, *args: Any) -> None:
        self._discard()

    def warn(self, *args: Any) -> None:
        self._discard()

    def warnf(self, fmt: str, *args: Any) -> None:
        self._discard()

    def info(self, *args: Any) -> None:
        self._discard()

    def infof(self, fmt: str, *args: Any) -> None:
        self._discard()

    def debug(self, *args: Any) -> None:
        self._discard()

    def debugf(self, fmt: str, *args: Any) -> None:
        self._discard()

    def trace(self, *args: Any) -> None:
        self._discard()

    def tracef(self, fmt: str, *args: Any) -> None:
        self._discard()


_logger: Logger = EmptyLogger()


def fatal(*args: Any) -> None:
    _logger.fatal(*args)


def fatalf(fmt: str, *args: Any) -> None:
    _logger.fatalf(fmt, *args)


def error(*args: Any) -> None:
    _logger.error(*args)


def errorf(fmt: str, *args: Any) -> None:
    _logger.errorf(fmt, *args)


def warn(*args: Any) -> None:
    _logger.warn(*args)


def warnf(fmt: str, *args: Any) -> None:
    _logger.warnf(fmt, *args)


def info(*args: Any) -> None:
    _logger.info(*args)


def infof(fmt: str, *args: Any) -> None:
    _logger.infof(fmt, *args)


def debug(*args: Any) -> None:
    _logger.debug(*args)


def debugf(fmt: str, *args: Any) -> None:
    _logger.debugf(fmt, *args)


def trace(*args: Any) -> None:
    _logger.trace(*args)


def tracef(fmt: str, *args: Any) -> None:
    _logger.tracef(fmt, *args)


def set_log_level(level: LogLevel | int) -> None:
    _logger.set_log_level(level)


def set_output(out: Any) -> None:
    _logger.set_output(out)


def register_logger(logger: Logger) -> None:
    """Make ``logger`` the backend for all module-level logging calls."""
    global _logger
    _logger = logger