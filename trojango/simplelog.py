"""Minimal logger writing timestamped lines to standard error."""

from __future__ import annotations

import sys
import threading
import time
from typing import Any

from trojango.log import LogLevel, _sprintf, _sprintln


class SimpleLogger:
    """Writes every enabled message as a timestamped line; set_output does not redirect."""

    def __init__(self, stream: Any = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self.log_level = LogLevel.ALL
        self.requested_output: Any = None

    def _write(self, text: str) -> None:
        if not text.endswith("\n"):
            text += "\n"
        line = time.strftime("%Y/%m/%d %H:%M:%S ") + text
        stream = self._stream if self._stream is not None else sys.stderr
        with self._lock:
            stream.write(line)
            stream.flush()

    def set_log_level(self, level: LogLevel | int) -> None:
        self.log_level = LogLevel(level)

    def set_output(self, out: Any) -> None:
        """Record the requested output; messages stay on the construction stream."""
        with self._lock:
            self.requested_output = out

    def fatal(self, *args: Any) -> None:
        if self.log_level <= LogLevel.FATAL:
            self._write(_sprintln(args))
        raise SystemExit(1)

    def fatalf(self, fmt: str, *args: Any) -> None:
        if self.log_level <= LogLevel.FATAL:
            self._write(_sprintf(fmt, args))
        raise SystemExit(1)

    def error(self, *args: Any) -> None:
        if self.log_level <= LogLevel.ERROR:
            self._write(_sprintln(args))

    def errorf(self, fmt: str, *args: Any) -> None:
        if self.log_level <= LogLevel.ERROR:
            self._write(_sprintf(fmt, args))

    def warn(self, *args: Any) -> None:
        if self.log_level <= LogLevel.WARN:
            self._write(_sprintln(args))

    def warnf(self, fmt: str, *args: Any) -> None:
        if self.log_level <= LogLevel.WARN:
            self._write(_sprintf(fmt, args))

    def info(self, *args: Any) -> None:
        if self.log_level <= LogLevel.INFO:
            self._write(_sprintln(args))

    def infof(self, fmt: str, *args: Any) -> None:
        if self.log_level <= LogLevel.INFO:
            self._write(_sprintf(fmt, args))

    def debug(self, *args: Any) -> None:
        if self.log_level <= LogLevel.ALL:
            self._write(_sprintln(args))

    def debugf(self, fmt: str, *args: Any) -> None:
        if self.log_level <= LogLevel.ALL:
            self._write(_sprintf(fmt, args))

    def trace(self, *args: Any) -> None:
        if self.log_level <= LogLevel.ALL:
            self._write(_sprintln(args))

    def tracef(self, fmt: str, *args: Any) -> None:
        if self.log_level <= LogLevel.ALL:
            self._write(_sprintf(fmt, args))