"""Byte buffer with ANSI colour helpers used by the terminal logger."""

from __future__ import annotations

import sys

_ANSI = sys.platform.startswith("linux")


def _code(seq: bytes) -> bytes:
    return seq if _ANSI else b""


COLOR_OFF = _code(b"\033[0m")
COLOR_RED = _code(b"\033[0;31m")
COLOR_GREEN = _code(b"\033[0;32m")
COLOR_ORANGE = _code(b"\033[0;33m")
COLOR_BLUE = _code(b"\033[0;34m")
COLOR_PURPLE = _code(b"\033[0;35m")
COLOR_CYAN = _code(b"\033[0;36m")
COLOR_GRAY = _code(b"\033[0;37m")


class ColorBuffer:
    """A growable byte buffer that can also emit colour escape sequences."""

    def __init__(self) -> None:
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def reset(self) -> None:
        """Empty the buffer."""
        self._data.clear()

    def append(self, data: bytes) -> None:
        self._data += data

    def append_byte(self, data: int) -> None:
        self._data.append(data)

    def append_int(self, val: int, width: int) -> None:
        """Append a non-negative integer, zero-padded to at least ``width`` digits."""
        if val < 0:
            raise ValueError("negative values are not supported")
        digits = str(val).zfill(width)
        if len(digits) > 8:
            raise ValueError("integer representation longer than 8 digits")
        self._data += digits.encode("ascii")

    def getvalue(self) -> bytes:
        """The buffered bytes."""
        return bytes(self._data)

    def off(self) -> None:
        self.append(COLOR_OFF)

    def red(self) -> None:
        self.append(COLOR_RED)

    def green(self) -> None:
        self.append(COLOR_GREEN)

    def orange(self) -> None:
        self.append(COLOR_ORANGE)

    def blue(self) -> None:
        self.append(COLOR_BLUE)

    def purple(self) -> None:
        self.append(COLOR_PURPLE)

    def cyan(self) -> None:
        self.append(COLOR_CYAN)

    def gray(self) -> None:
        self.append(COLOR_GRAY)


def _mix(data: bytes, color: bytes) -> bytes:
    return color + bytes(data) + COLOR_OFF


def red(data: bytes) -> bytes:
    """Wrap ``data`` in red."""
    return _mix(data, COLOR_RED)


def green(data: bytes) -> bytes:
    """Wrap ``data`` in green."""
    return _mix(data, COLOR_GREEN)


def orange(data: bytes) -> bytes:
    """Wrap ``data`` in orange."""
    return _mix(data, COLOR_ORANGE)


def blue(data: bytes) -> bytes:
    """Wrap ``data`` in blue."""
    return _mix(data, COLOR_BLUE)


def purple(data: bytes) -> bytes:
    """Wrap ``data`` in purple."""
    return _mix(data, COLOR_PURPLE)


def cyan(data: bytes) -> bytes:
    """Wrap ``data`` in cyan."""
    return _mix(data, COLOR_CYAN)


def gray(data: bytes) -> bytes:
    """Wrap ``data`` in gray."""
    return _mix(data, COLOR_GRAY)