"""Readers that can replay buffered input and writers that coalesce early writes."""

from __future__ import annotations

import threading
from typing import Any, Callable


def _raw_reader(raw: Any) -> Callable[[int], bytes]:
    reader = getattr(raw, "read", None)
    if reader is None:
        reader = raw.recv
    return reader


def _raw_writer(raw: Any) -> Callable[[bytes], Any]:
    writer = getattr(raw, "write", None)
    if writer is None:
        writer = raw.sendall
    return writer


class RewindReader:
    """Wraps a byte source; while buffering, bytes read can be replayed with rewind()."""

    def __init__(self, raw: Any) -> None:
        self._read_raw = _raw_reader(raw)
        self._lock = threading.Lock()
        self._buf = bytearray()
        self._read_idx = 0
        self._rewound = False
        self._buffering = False
        self._buffer_size = 0

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, from the replay buffer first when rewound."""
        with self._lock:
            if self._rewound:
                if self._read_idx < len(self._buf):
                    chunk = bytes(self._buf[self._read_idx:self._read_idx + size])
                    self._read_idx += len(chunk)
                    return chunk
                self._rewound = False
            data = self._read_raw(size)
            if self._buffering:
                self._buf += data
            return data

    def read_byte(self) -> int:
        """Read a single byte; raises EOFError when the source is exhausted."""
        data = self.read(1)
        if not data:
            raise EOFError("no more data")
        return data[0]

    def discard(self, n: int) -> int:
        """Skip up to ``n`` bytes and return how many were skipped."""
        discarded = 0
        while discarded < n:
            chunk = self.read(min(128, n - discarded))
            if not chunk:
                break
            discarded += len(chunk)
        return discarded

    def rewind(self) -> None:
        """Replay buffered bytes from the start on the next reads."""
        with self._lock:
            if self._buffer_size == 0:
                raise RuntimeError("no buffer")
            self._rewound = True
            self._read_idx = 0

    def stop_buffering(self) -> None:
        """Stop recording newly read bytes; already buffered bytes stay replayable."""
        with self._lock:
            self._buffering = False

    def set_buffer_size(self, size: int) -> None:
        """Start buffering with a size hint, or disable buffering with size 0."""
        with self._lock:
            if size == 0:
                if not self._buffering:
                    raise RuntimeError("reader is disabled")
                self._buffering = False
                self._buf = bytearray()
                self._read_idx = 0
                self._buffer_size = 0
            else:
                if self._buffering:
                    raise RuntimeError("reader is buffering")
                self._buffering = True
                self._read_idx = 0
                self._buffer_size = size
                self._buf = bytearray()


class RewindConn(RewindReader):
    """A socket-like connection whose reads go through a RewindReader."""

    def __init__(self, conn: Any) -> None:
        super().__init__(conn)
        self._read_raw = conn.recv
        self._conn = conn

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes from the connection, replaying when rewound."""
        return super().read(size)

    def recv(self, size: int) -> bytes:
        return self.read(size)

    def close(self) -> None:
        self._conn.close()

    def __getattr__(self, name: str) -> Any:
        conn = self.__dict__.get("_conn")
        if conn is None:
            raise AttributeError(name)
        return getattr(conn, name)

    def __enter__(self) -> "RewindConn":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class StickyWriter:
    """Holds back the first ``max_buffered`` writes and sends them as one."""

    def __init__(self, raw: Any, max_buffered: int = 0) -> None:
        self._write_raw = _raw_writer(raw)
        self.max_buffered = max_buffered
        self._pending = bytearray()

    def write(self, data: bytes) -> int:
        if self.max_buffered > 0:
            self.max_buffered -= 1
            self._pending += data
            if self.max_buffered != 0:
                return len(data)
            pending = bytes(self._pending)
            self._pending = bytearray()
            self._write_raw(pending)
            return len(data)
        written = self._write_raw(data)
        return len(data) if written is None else written