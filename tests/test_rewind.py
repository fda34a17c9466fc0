import io
import os
import socket

import pytest

from trojango.rewind import RewindConn, RewindReader, StickyWriter


def test_buffered_reader():
    payload = os.urandom(1024)
    r = RewindReader(io.BytesIO(payload))
    r.set_buffer_size(2048)
    buf1 = r.read(512)
    r.rewind()
    buf2 = r.read(512)
    assert buf1 == buf2
    buf3 = r.read(512)
    assert buf3 == payload[512:]
    r.rewind()
    buf4 = r.read(1024)
    assert buf4 == payload


def test_rewind_without_buffer_raises():
    r = RewindReader(io.BytesIO(b"abc"))
    with pytest.raises(RuntimeError):
        r.rewind()


def test_disable_when_not_buffering_raises():
    r = RewindReader(io.BytesIO(b"abc"))
    with pytest.raises(RuntimeError):
        r.set_buffer_size(0)


def test_enable_twice_raises():
    r = RewindReader(io.BytesIO(b"abc"))
    r.set_buffer_size(16)
    with pytest.raises(RuntimeError):
        r.set_buffer_size(16)


def test_stop_buffering_limits_replay():
    r = RewindReader(io.BytesIO(b"abcdef"))
    r.set_buffer_size(16)
    assert r.read(2) == b"ab"
    r.stop_buffering()
    assert r.read(2) == b"cd"
    r.rewind()
    assert r.read(10) == b"ab"
    assert r.read(10) == b"ef"


def test_disable_buffering_clears_buffer():
    r = RewindReader(io.BytesIO(b"abcdef"))
    r.set_buffer_size(16)
    r.read(3)
    r.set_buffer_size(0)
    with pytest.raises(RuntimeError):
        r.rewind()
    assert r.read(10) == b"def"


def test_read_byte_and_eof():
    r = RewindReader(io.BytesIO(b"\x05"))
    assert r.read_byte() == 5
    with pytest.raises(EOFError):
        r.read_byte()


def test_discard():
    payload = bytes(range(256)) * 2
    r = RewindReader(io.BytesIO(payload))
    assert r.discard(300) == 300
    assert r.read(4) == payload[300:304]
    assert r.discard(1000) == len(payload) - 304


def test_rewind_conn_over_socketpair():
    left, right = socket.socketpair()
    with RewindConn(left) as conn:
        conn.set_buffer_size(64)
        right.sendall(b"hello world")
        first = conn.recv(5)
        assert first == b"hello"
        conn.rewind()
        assert conn.read(5) == b"hello"
        conn.sendall(b"reply")
        assert right.recv(16) == b"reply"
    right.close()


def test_sticky_writer_coalesces():
    sink = io.BytesIO()
    writes = []

    class Recorder:
        def write(self, data):
            writes.append(bytes(data))
            return sink.write(data)

    w = StickyWriter(Recorder(), max_buffered=2)
    assert w.write(b"ab") == 2
    assert writes == []
    assert w.write(b"cd") == 2
    assert writes == [b"abcd"]
    assert w.write(b"ef") == 2
    assert writes == [b"abcd", b"ef"]
    assert w.max_buffered == 0