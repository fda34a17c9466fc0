"""Network, file and path helpers."""

from __future__ import annotations

import hashlib
import os
import socket
import struct
import sys
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from trojango.errors import TrojanError

KIB = 1024
MIB = KIB * 1024
GIB = MIB * 1024


def _float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def human_friendly_traffic(num_bytes: int) -> str:
    """Render a byte count as B, KiB, MiB or GiB."""
    if num_bytes <= KIB:
        return f"{num_bytes} B"
    if num_bytes <= MIB:
        return f"{_float32(num_bytes / KIB):.2f} KiB"
    if num_bytes <= GIB:
        return f"{_float32(num_bytes / MIB):.2f} MiB"
    return f"{_float32(num_bytes / GIB):.2f} GiB"


def pick_port(network: str, host: str) -> int:
    """Return a currently free port on ``host`` for "tcp" or "udp", or 0."""
    kinds = {"tcp": socket.SOCK_STREAM, "udp": socket.SOCK_DGRAM}
    kind = kinds.get(network)
    if kind is None:
        return 0
    for _ in range(16):
        try:
            infos = socket.getaddrinfo(host or None, 0, type=kind, flags=socket.AI_PASSIVE)
            family, sock_type, proto, _, addr = infos[0]
            with socket.socket(family, sock_type, proto) as sock:
                sock.bind(addr)
                if kind == socket.SOCK_STREAM:
                    sock.listen()
                return sock.getsockname()[1]
        except OSError:
            continue
    return 0


def write_all_bytes(writer: Any, payload: bytes) -> None:
    """Write ``payload`` to ``writer`` until every byte has been accepted."""
    view = memoryview(payload)
    while view:
        written = writer.write(view)
        if written is None:
            return
        if written <= 0:
            raise OSError("short write")
        view = view[written:]


def write_file(path: str | os.PathLike, payload: bytes) -> None:
    """Create or truncate ``path`` and write ``payload`` to it."""
    with open(path, "wb") as f:
        write_all_bytes(f, payload)


def fetch_http_content(target: str) -> bytes:
    """GET ``target`` over HTTP(S) and return the body of a 200 response."""
    try:
        parsed = urllib.parse.urlsplit(target)
    except ValueError as exc:
        raise TrojanError(f"invalid URL: {target}") from exc
    if parsed.scheme.lower() not in ("http", "https"):
        raise TrojanError(f"invalid scheme: {parsed.scheme}")

    request = urllib.request.Request(target, method="GET", headers={"Connection": "close"})
    try:
        with urllib.request.urlopen(request, timeout=30) as resp:
            if resp.status != 200:
                raise TrojanError(f"unexpected HTTP status code: {resp.status}")
            try:
                return resp.read()
            except OSError as exc:
                raise TrojanError("failed to read HTTP response") from exc
    except urllib.error.HTTPError as exc:
        raise TrojanError(f"unexpected HTTP status code: {exc.code}") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise TrojanError(f"failed to dial to {target}") from exc


def sha224_string(password: str) -> str:
    """Hex SHA-224 digest of ``password``."""
    return hashlib.sha224(password.encode("utf-8")).hexdigest()


def get_program_dir() -> str:
    """Absolute directory of the running program."""
    return os.path.abspath(os.path.dirname(sys.argv[0]))


def get_asset_location(file: str) -> str:
    """Resolve an asset path: absolute as is, else under $TROJAN_GO_LOCATION_ASSET or the program dir."""
    if os.path.isabs(file):
        return file
    loc = os.environ.get("TROJAN_GO_LOCATION_ASSET", "")
    if loc:
        return os.path.join(os.path.abspath(loc), file)
    return os.path.join(get_program_dir(), file)