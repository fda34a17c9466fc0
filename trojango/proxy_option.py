"""Options that start a proxy from a config file or from standard input."""

from __future__ import annotations

import platform
import sys
from typing import Any, NoReturn

from trojango import log
from trojango.errors import TrojanError
from trojango.option import OptionHandler
from trojango.proxy import NAME, new_proxy_from_config_data

VERSION = "Custom Version"
COMMIT = "Unknown Git Commit ID"

DEFAULT_CONFIG_PATHS = ("config.json", "config.yml", "config.yaml")


def _fatal(*args: Any) -> NoReturn:
    log.fatal(*args)
    raise SystemExit(1)


def detect_and_read_config(file: str) -> tuple[bytes, bool]:
    """Read a .json, .yaml or .yml config file; return its bytes and whether it is JSON."""
    if file.endswith(".json"):
        is_json = True
    elif file.endswith((".yaml", ".yml")):
        is_json = False
    else:
        log.fatalf("unsupported config format: %s. use .yaml or .json instead.", file)
        raise SystemExit(1)
    with open(file, "rb") as f:
        return f.read(), is_json


def _start(data: bytes, is_json: bool) -> None:
    try:
        proxy = new_proxy_from_config_data(data, is_json)
    except (TrojanError, OSError, ValueError) as exc:
        _fatal(exc)
    proxy.run()


class ConfigFileOption(OptionHandler):
    """Starts the proxy from the given config file, or from a default one."""

    def __init__(self, path: str = "") -> None:
        self.path = path

    def name(self) -> str:
        return NAME

    def handle(self) -> None:
        data: bytes | None = None
        is_json = False
        if not self.path:
            log.warn("no specified config file, use default path to detect config file")
            for file in DEFAULT_CONFIG_PATHS:
                log.warn("try to load config from default path:", file)
                try:
                    data, is_json = detect_and_read_config(file)
                except OSError as exc:
                    log.warn(exc)
                    continue
                break
        else:
            try:
                data, is_json = detect_and_read_config(self.path)
            except OSError as exc:
                _fatal(exc)
        if data is None:
            _fatal("no valid config")
        log.info("trojan-go", VERSION, "initializing")
        _start(data, is_json)

    def priority(self) -> int:
        return -1


class StdinOption(OptionHandler):
    """Starts the proxy from a config read from standard input."""

    def __init__(self, format: str | None = "disabled", suppress_hint: bool = False,
                 stdin: Any = None, stdout: Any = None) -> None:
        self.format = format
        self.suppress_hint = suppress_hint
        self._stdin = stdin
        self._stdout = stdout

    def name(self) -> str:
        return NAME + "_STDIN"

    def _is_format_json(self) -> bool:
        if self.format is None:
            raise TrojanError("format specifier is nil")
        if self.format == "disabled":
            raise TrojanError("reading from stdin is disabled")
        return self.format.lower() == "json"

    def handle(self) -> None:
        is_json = self._is_format_json()
        if not self.suppress_hint:
            out = self._stdout if self._stdout is not None else sys.stdout
            system = platform.system().lower()
            machine = platform.machine().lower()
            print(f"Trojan-Go {VERSION} ({system}/{machine})", file=out)
            kind = "JSON" if is_json else "YAML"
            print(f"Reading {kind} configuration from stdin.", file=out)

        stream = self._stdin if self._stdin is not None else getattr(sys.stdin, "buffer", sys.stdin)
        try:
            data = stream.read()
        except OSError as exc:
            log.fatalf("Failed to read from stdin: %s", exc)
            raise SystemExit(1) from exc
        if isinstance(data, str):
            data = data.encode("utf-8")
        _start(data, is_json)

    def priority(self) -> int:
        return 0