"""Extract one entry from geoip/geosite .dat files without parsing the whole list.

Each file is a list message whose entries are length-delimited field 1, and
every entry begins with its country code as a length-delimited field 1.
"""

from __future__ import annotations

import os
from typing import BinaryIO

from trojango.errors import TrojanError

_TAG = 0x0A
_FAILED_TO_READ = "failed to read bytes"
_FAILED_TO_READ_EXPECTED = "failed to read expected length of bytes"
_INVALID_FILE = "invalid geodata file"
_INVALID_VARINT = "invalid geodata varint length"


class GeodataError(TrojanError):
    """The geodata file could not be read or is malformed."""


class CodeNotFoundError(GeodataError):
    """The requested code is not in the geodata file."""

    def __init__(self, info: str = "code not found") -> None:
        super().__init__(info)


def _consume_varint(buf: bytes) -> tuple[int, int]:
    value = 0
    for i, b in enumerate(buf[:10]):
        value |= (b & 0x7F) << (7 * i)
        if b < 0x80:
            if i == 9 and b > 1:
                break
            return value, i + 1
    raise GeodataError(_INVALID_VARINT)


def _read(stream: BinaryIO, size: int) -> bytes:
    if size == 0:
        return b""
    try:
        chunk = stream.read(size)
    except OSError as exc:
        raise GeodataError(_FAILED_TO_READ) from exc
    if not chunk:
        raise CodeNotFoundError()
    if len(chunk) != size:
        raise GeodataError(_FAILED_TO_READ_EXPECTED)
    return bytes(chunk)


def emit_bytes(stream: BinaryIO, code: str) -> bytes:
    """Return the serialized entry of ``code`` (case-insensitive) from a seekable stream."""
    wanted = code.casefold()
    step = 1
    inner = False
    pending = bytearray()
    advance = 1
    entry_len = code_len = code_len_size = 0

    while True:
        chunk = _read(stream, advance)
        if step in (1, 3):
            if chunk[0] != _TAG:
                raise GeodataError(_INVALID_FILE)
            advance = 1
            step += 1
        elif step in (2, 4):
            pending += chunk
            if chunk[0] > 0x7F:
                advance = 1
                continue
            length, size = _consume_varint(bytes(pending))
            pending.clear()
            if not inner:
                inner = True
                entry_len = length
                advance = 1
            else:
                inner = False
                code_len = length
                code_len_size = size
                advance = code_len
            step += 1
        elif step == 5:
            if chunk.decode("utf-8", "surrogateescape").casefold() == wanted:
                step += 1
                stream.seek(-(1 + code_len_size + code_len), os.SEEK_CUR)
                advance = entry_len
            else:
                step = 1
                stream.seek(entry_len - code_len - code_len_size - 1, os.SEEK_CUR)
                advance = 1
        else:
            return chunk


def decode(filename: str | os.PathLike, code: str) -> bytes:
    """Return the serialized entry of ``code`` from the geodata file ``filename``."""
    with open(filename, "rb") as f:
        return emit_bytes(f, code)