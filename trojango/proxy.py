"""Relays connections and packets from inbound tunnels to an outbound tunnel."""

from __future__ import annotations

import queue
import random
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from trojango import log
from trojango.config import (
    Context,
    from_context,
    register_config_creator,
    setting,
    with_json_config,
    with_yaml_config,
)
from trojango.errors import TrojanError

NAME = "PROXY"
MAX_PACKET_SIZE = 8 * 1024

_CONN_BUFFER = 32 * 1024
_POLL = 0.1
_RELAY_ERRORS = (OSError, EOFError, TrojanError)


@dataclass
class ProxyConfig:
    """Settings shared by every kind of proxy."""

    run_type: str = setting("run_type", "run-type", default="")
    log_level: int = setting("log_level", "log-level", default=1)
    log_file: str = setting("log_file", "log-file", default="")


register_config_creator(NAME, ProxyConfig)


def _close(conn: Any) -> None:
    try:
        conn.close()
    except _RELAY_ERRORS:
        pass


def _spawn(target: Callable[..., Any], *args: Any) -> None:
    threading.Thread(target=target, args=args, daemon=True).start()


def _pump_stream(src: Any, dst: Any, results: queue.Queue) -> None:
    try:
        while True:
            data = src.recv(_CONN_BUFFER)
            if not data:
                break
            dst.sendall(data)
    except _RELAY_ERRORS as exc:
        results.put(exc)
        return
    results.put(None)


def _pump_packets(src: Any, dst: Any, results: queue.Queue) -> None:
    try:
        while True:
            data, metadata = src.read_with_metadata(MAX_PACKET_SIZE)
            if not data:
                break
            dst.write_with_metadata(data, metadata)
    except _RELAY_ERRORS as exc:
        results.put(exc)
        return
    results.put(None)


class Proxy:
    """Accepts from every source tunnel and relays each stream or packet flow to the sink.

    Sources provide ``accept_conn()``, ``accept_packet()`` and ``close()``; the sink
    provides ``dial_conn(address)``, ``dial_packet()`` and ``close()``.
    """

    def __init__(self, ctx: Context, sources: Iterable[Any], sink: Any) -> None:
        self._ctx = ctx
        self._sources = list(sources)
        self._sink = sink

    def run(self) -> None:
        """Start relaying and block until the proxy is closed."""
        for source in self._sources:
            _spawn(self._accept_loop, source.accept_conn, self._relay_conn, "connection")
        for source in self._sources:
            _spawn(self._accept_loop, source.accept_packet, self._relay_packet, "packet")
        self._ctx.wait()

    def close(self) -> None:
        """Cancel the proxy and close the sink and every source."""
        self._ctx.cancel()
        _close(self._sink)
        for source in self._sources:
            _close(source)

    def _accept_loop(self, accept: Callable[[], Any],
                     handle: Callable[[Any], None], what: str) -> None:
        while True:
            try:
                inbound = accept()
            except _RELAY_ERRORS as exc:
                if self._ctx.done():
                    log.debug("exiting")
                    return
                log.error(TrojanError(f"failed to accept {what}").base(exc))
                continue
            _spawn(handle, inbound)

    def _wait_first(self, results: queue.Queue, what: str) -> None:
        while True:
            try:
                err = results.get(timeout=_POLL)
            except queue.Empty:
                if self._ctx.done():
                    log.debug(f"shutting down {what} relay")
                    return
                continue
            if err is not None:
                log.error(err)
            log.debug(f"{what} relay ends")
            return

    def _relay_conn(self, inbound: Any) -> None:
        try:
            try:
                outbound = self._sink.dial_conn(inbound.metadata.address)
            except _RELAY_ERRORS as exc:
                log.error(TrojanError("proxy failed to dial connection").base(exc))
                return
            try:
                results: queue.Queue = queue.Queue()
                _spawn(_pump_stream, outbound, inbound, results)
                _spawn(_pump_stream, inbound, outbound, results)
                self._wait_first(results, "conn")
            finally:
                _close(outbound)
        finally:
            _close(inbound)

    def _relay_packet(self, inbound: Any) -> None:
        try:
            try:
                outbound = self._sink.dial_packet()
            except _RELAY_ERRORS as exc:
                log.error(TrojanError("proxy failed to dial packet").base(exc))
                return
            try:
                results: queue.Queue = queue.Queue()
                _spawn(_pump_packets, inbound, outbound, results)
                _spawn(_pump_packets, outbound, inbound, results)
                self._wait_first(results, "packet")
            finally:
                _close(outbound)
        finally:
            _close(inbound)


Creator = Callable[[Context], Any]

_creators: dict[str, Creator] = {}


def register_proxy_creator(name: str, creator: Creator) -> None:
    """Register the factory that builds a proxy for run type ``name``."""
    _creators[name] = creator


def new_proxy_from_config_data(data: bytes | str, is_json: bool) -> Any:
    """Parse config data and build the proxy its run type names."""
    # a distinct context per proxy keeps per-instance state apart
    ctx = Context().with_value(NAME + "_ID", random.getrandbits(63))
    if is_json:
        ctx = with_json_config(ctx, data)
    else:
        ctx = with_yaml_config(ctx, data)
    cfg = from_context(ctx, NAME)
    create = _creators.get(cfg.run_type.upper())
    if create is None:
        raise TrojanError("unknown proxy type: " + cfg.run_type)
    log.set_log_level(cfg.log_level)
    if cfg.log_file:
        try:
            out = open(cfg.log_file, "a", encoding="utf-8")
        except OSError as exc:
            raise TrojanError("failed to open log file").base(exc) from exc
        log.set_output(out)
    return create(ctx)