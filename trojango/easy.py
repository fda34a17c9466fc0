"""Easy mode: start a client or server from a few command-line values."""

from __future__ import annotations

import json
import re
from typing import Any, NoReturn

from trojango import log
from trojango.errors import TrojanError
from trojango.option import OptionHandler
from trojango.proxy import new_proxy_from_config_data

_PORT = re.compile(r"[+-]?[0-9]+")


def _fatal(*args: Any) -> NoReturn:
    log.fatal(*args)
    raise SystemExit(1)


def _split_host_port(addr: str) -> tuple[str, str]:
    if addr.startswith("["):
        end = addr.find("]")
        if end < 0:
            raise ValueError(f"address {addr}: missing ']' in address")
        host, rest = addr[1:end], addr[end + 1:]
        if not rest.startswith(":"):
            raise ValueError(f"address {addr}: missing port in address")
        port = rest[1:]
        if ":" in port:
            raise ValueError(f"address {addr}: too many colons in address")
        return host, port
    if ":" not in addr:
        raise ValueError(f"address {addr}: missing port in address")
    host, _, port = addr.rpartition(":")
    if ":" in host:
        raise ValueError(f"address {addr}: too many colons in address")
    return host, port


def _parse_addr(kind: str, addr: str) -> tuple[str, int]:
    try:
        host, port = _split_host_port(addr)
    except ValueError as exc:
        raise TrojanError(f"invalid {kind} addr format:{addr}").base(exc) from exc
    if not _PORT.fullmatch(port):
        raise TrojanError(f"invalid {kind} port: {port!r}")
    return host, int(port)


def generate_client_config(password: str, local: str, remote: str) -> dict[str, Any]:
    """Build the client config for easy mode."""
    if not local:
        log.warn("client local addr is unspecified, using 127.0.0.1:1080")
        local = "127.0.0.1:1080"
    local_host, local_port = _parse_addr("local", local)
    remote_host, remote_port = _parse_addr("remote", remote)
    return {
        "run_type": "client",
        "local_addr": local_host,
        "local_port": local_port,
        "remote_addr": remote_host,
        "remote_port": remote_port,
        "password": [password],
    }


def generate_server_config(password: str, local: str, remote: str,
                           cert: str, key: str) -> dict[str, Any]:
    """Build the server config for easy mode."""
    if not remote:
        log.warn("server remote addr is unspecified, using 127.0.0.1:80")
        remote = "127.0.0.1:80"
    if not local:
        log.warn("server local addr is unspecified, using 0.0.0.0:443")
        local = "0.0.0.0:443"
    local_host, local_port = _parse_addr("local", local)
    remote_host, remote_port = _parse_addr("remote", remote)
    return {
        "run_type": "server",
        "local_addr": local_host,
        "local_port": local_port,
        "remote_addr": remote_host,
        "remote_port": remote_port,
        "password": [password],
        "ssl": {"sni": "", "cert": cert, "key": key},
    }


class EasyOption(OptionHandler):
    """Runs a client or server without a config file."""

    def __init__(self, server: bool = False, client: bool = False, password: str = "",
                 local: str = "", remote: str = "", key: str = "server.key",
                 cert: str = "server.crt") -> None:
        self.server = server
        self.client = client
        self.password = password
        self.local = local
        self.remote = remote
        self.key = key
        self.cert = cert

    def name(self) -> str:
        return "easy"

    def handle(self) -> None:
        if not self.server and not self.client:
            raise TrojanError("empty")
        if not self.password:
            _fatal("empty password is not allowed")
        log.info("easy mode enabled, trojan-go will NOT use the config file")
        try:
            if self.client:
                cfg = generate_client_config(self.password, self.local, self.remote)
                label = "generated config:"
            else:
                cfg = generate_server_config(self.password, self.local, self.remote,
                                             self.cert, self.key)
                label = "generated json config:"
        except TrojanError as exc:
            _fatal(exc)
        text = json.dumps(cfg, separators=(",", ":"))
        log.info(label)
        log.info(text)
        try:
            proxy = new_proxy_from_config_data(text.encode("utf-8"), True)
        except (TrojanError, OSError, ValueError) as exc:
            _fatal(exc)
        proxy.run()

    def priority(self) -> int:
        return 50