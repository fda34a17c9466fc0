"""Relays rejected inbound connections to another address."""

from __future__ import annotations

import queue
import socket
import threading
from dataclasses import dataclass
from typing import Any, Callable

from trojango import log
from trojango.config import Context
from trojango.errors import TrojanError

Dial = Callable[[Any], socket.socket]

_BUFFER_SIZE = 32 * 1024
_POLL = 0.1


def _default_dial(addr: Any) -> socket.socket:
    return socket.create_connection(addr)


def _close(conn: Any) -> None:
    try:
        conn.shutdown(socket.SHUT_RDWR)
    except (OSError, AttributeError):
        pass
    try:
        conn.close()
    except OSError:
        pass


def _peer(conn: Any) -> Any:
    try:
        return conn.getpeername()
    except (OSError, AttributeError):
        return "unknown"


@dataclass
class Redirection:
    """An inbound connection to relay to ``redirect_to`` using ``dial``."""

    dial: Dial | None = None
    redirect_to: Any = None
    inbound_conn: Any = None


class Redirector:
    """Relays queued redirections in the background until ``ctx`` is cancelled."""

    def __init__(self, ctx: Context) -> None:
        self._ctx = ctx
        self._queue: queue.Queue[Redirection] = queue.Queue(maxsize=64)
        self._worker = threading.Thread(target=self._run, daemon=True)
        self._worker.start()

    def redirect(self, redirection: Redirection) -> None:
        """Queue ``redirection``; gives up once the context is cancelled."""
        while True:
            if self._ctx.done():
                log.debug("exiting")
                return
            try:
                self._queue.put(redirection, timeout=_POLL)
            except queue.Full:
                continue
            log.debug("redirect request")
            return

    def _run(self) -> None:
        while not self._ctx.done():
            try:
                redirection = self._queue.get(timeout=_POLL)
            except queue.Empty:
                continue
            threading.Thread(target=self._handle, args=(redirection,), daemon=True).start()
        log.debug("shutting down redirector")

    def _handle(self, redirection: Redirection) -> None:
        inbound = redirection.inbound_conn
        if inbound is None:
            log.error("nil inbound conn")
            return
        try:
            target = redirection.redirect_to
            if target is None:
                log.error("nil redirection addr")
                return
            dial = redirection.dial or _default_dial
            log.warn("redirecting connection from", _peer(inbound), "to", target)
            try:
                outbound = dial(target)
            except OSError as exc:
                log.error(TrojanError("failed to redirect to target address").base(exc))
                return
            try:
                self._relay(inbound, outbound)
            finally:
                _close(outbound)
        finally:
            _close(inbound)

    def _relay(self, inbound: Any, outbound: Any) -> None:
        finished = threading.Event()
        errors: list[BaseException] = []

        def pump(src: Any, dst: Any) -> None:
            try:
                while True:
                    data = src.recv(_BUFFER_SIZE)
                    if not data:
                        return
                    dst.sendall(data)
            except OSError as exc:
                errors.append(exc)
            finally:
                finished.set()

        for src, dst in ((inbound, outbound), (outbound, inbound)):
            threading.Thread(target=pump, args=(src, dst), daemon=True).start()

        while not finished.wait(_POLL):
            if self._ctx.done():
                log.debug("exiting")
                return
        if errors:
            log.error(TrojanError("failed to redirect").base(errors[0]))
        log.info("redirection done")