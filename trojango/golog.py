"""Colourful logger with timestamps and caller information."""

from __future__ import annotations

import datetime
import inspect
import io
import os
import sys
import threading
from dataclasses import dataclass
from typing import Any

from trojango import colorful
from trojango.colorful import ColorBuffer
from trojango.log import LogLevel, _sprintf, _sprintln


@dataclass(frozen=True)
class Prefix:
    """Plain and coloured forms of a level tag, and whether to add caller info."""

    plain: bytes
    color: bytes
    file: bool = False


_PLAIN_FATAL = b"[FATAL] "
_PLAIN_ERROR = b"[ERROR] "
_PLAIN_WARN = b"[WARN]  "
_PLAIN_INFO = b"[INFO]  "
_PLAIN_DEBUG = b"[DEBUG] "
_PLAIN_TRACE = b"[TRACE] "

FATAL_PREFIX = Prefix(_PLAIN_FATAL, colorful.red(_PLAIN_FATAL), True)
ERROR_PREFIX = Prefix(_PLAIN_ERROR, colorful.red(_PLAIN_ERROR), True)
WARN_PREFIX = Prefix(_PLAIN_WARN, colorful.orange(_PLAIN_WARN))
INFO_PREFIX = Prefix(_PLAIN_INFO, colorful.green(_PLAIN_INFO))
DEBUG_PREFIX = Prefix(_PLAIN_DEBUG, colorful.purple(_PLAIN_DEBUG), True)
TRACE_PREFIX = Prefix(_PLAIN_TRACE, colorful.cyan(_PLAIN_TRACE))


def _is_terminal(out: Any) -> bool:
    try:
        return bool(out.isatty())
    except (AttributeError, ValueError, OSError):
        return False


def _is_text(out: Any) -> bool:
    return isinstance(out, io.TextIOBase) or hasattr(out, "encoding")


def _caller(depth: int) -> tuple[str, str, int]:
    frame = inspect.currentframe()
    for _ in range(depth + 1):
        if frame is None:
            break
        frame = frame.f_back
    if frame is None:
        return "<unknown file>", "<unknown function>", 0
    code = frame.f_code
    name = getattr(code, "co_qualname", code.co_name)
    return os.path.basename(code.co_filename), name, frame.f_lineno


class Logger:
    """Writes level-tagged lines to a stream, coloured when it is a terminal."""

    def __init__(self, out: Any = None) -> None:
        if out is None:
            out = sys.stdout
        self._lock = threading.RLock()
        self._out = out
        self._color = _is_terminal(out)
        self._debug = False
        self._timestamp = True
        self._quiet = False
        self._level = int(LogLevel.ALL)
        self._buf = ColorBuffer()

    def set_log_level(self, level: LogLevel | int) -> None:
        with self._lock:
            self._level = int(level)

    def set_output(self, out: Any) -> None:
        """Send output to ``out``; colour only if it is a terminal."""
        with self._lock:
            self._color = _is_terminal(out)
            self._out = out

    def with_color(self) -> "Logger":
        with self._lock:
            self._color = True
        return self

    def without_color(self) -> "Logger":
        with self._lock:
            self._color = False
        return self

    def with_debug(self) -> "Logger":
        with self._lock:
            self._debug = True
        return self

    def without_debug(self) -> "Logger":
        with self._lock:
            self._debug = False
        return self

    def is_debug(self) -> bool:
        with self._lock:
            return self._debug

    def with_timestamp(self) -> "Logger":
        with self._lock:
            self._timestamp = True
        return self

    def without_timestamp(self) -> "Logger":
        with self._lock:
            self._timestamp = False
        return self

    def quiet(self) -> "Logger":
        with self._lock:
            self._quiet = True
        return self

    def no_quiet(self) -> "Logger":
        with self._lock:
            self._quiet = False
        return self

    def is_quiet(self) -> bool:
        with self._lock:
            return self._quiet

    def output(self, depth: int, prefix: Prefix, data: str) -> None:
        """Write one line; ``depth`` selects the caller frame reported for file prefixes."""
        if self.is_quiet():
            return
        now = datetime.datetime.now()
        if prefix.file:
            file, fn, line = _caller(depth + 2)
        with self._lock:
            buf = self._buf
            buf.reset()
            buf.append(prefix.color if self._color else prefix.plain)
            if self._timestamp:
                if self._color:
                    buf.blue()
                buf.append_int(now.year, 4)
                buf.append_byte(ord("/"))
                buf.append_int(now.month, 2)
                buf.append_byte(ord("/"))
                buf.append_int(now.day, 2)
                buf.append_byte(ord(" "))
                buf.append_int(now.hour, 2)
                buf.append_byte(ord(":"))
                buf.append_int(now.minute, 2)
                buf.append_byte(ord(":"))
                buf.append_int(now.second, 2)
                buf.append_byte(ord(" "))
                if self._color:
                    buf.off()
            if prefix.file:
                if self._color:
                    buf.orange()
                buf.append(fn.encode("utf-8"))
                buf.append_byte(ord(":"))
                buf.append(file.encode("utf-8"))
                buf.append_byte(ord(":"))
                buf.append_int(line, 0)
                buf.append_byte(ord(" "))
                if self._color:
                    buf.off()
            buf.append(data.encode("utf-8"))
            if not data.endswith("\n"):
                buf.append_byte(ord("\n"))
            payload = buf.getvalue()
            if _is_text(self._out):
                self._out.write(payload.decode("utf-8", "replace"))
            else:
                self._out.write(payload)

    def _enabled(self, threshold: int) -> bool:
        with self._lock:
            return self._level <= threshold

    def _debug_enabled(self) -> bool:
        with self._lock:
            return self._level == LogLevel.ALL

    def fatal(self, *args: Any) -> None:
        """Log and end the process with status 1."""
        if self._enabled(LogLevel.FATAL):
            self.output(1, FATAL_PREFIX, _sprintln(args))
        raise SystemExit(1)

    def fatalf(self, fmt: str, *args: Any) -> None:
        """Log formatted and end the process with status 1."""
        if self._enabled(LogLevel.FATAL):
            self.output(1, FATAL_PREFIX, _sprintf(fmt, args))
        raise SystemExit(1)

    def error(self, *args: Any) -> None:
        if self._enabled(LogLevel.ERROR):
            self.output(1, ERROR_PREFIX, _sprintln(args))

    def errorf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.ERROR):
            self.output(1, ERROR_PREFIX, _sprintf(fmt, args))

    def warn(self, *args: Any) -> None:
        if self._enabled(LogLevel.WARN):
            self.output(1, WARN_PREFIX, _sprintln(args))

    def warnf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.WARN):
            self.output(1, WARN_PREFIX, _sprintf(fmt, args))

    def info(self, *args: Any) -> None:
        if self._enabled(LogLevel.INFO):
            self.output(1, INFO_PREFIX, _sprintln(args))

    def infof(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.INFO):
            self.output(1, INFO_PREFIX, _sprintf(fmt, args))

    def debug(self, *args: Any) -> None:
        if self._debug_enabled():
            self.output(1, DEBUG_PREFIX, _sprintln(args))

    def debugf(self, fmt: str, *args: Any) -> None:
        if self._debug_enabled():
            self.output(1, DEBUG_PREFIX, _sprintf(fmt, args))

    def trace(self, *args: Any) -> None:
        if self._debug_enabled():
            self.output(1, TRACE_PREFIX, _sprintln(args))

    def tracef(self, fmt: str, *args: Any) -> None:
        if self._debug_enabled():
            self.output(1, TRACE_PREFIX, _sprintf(fmt, args))