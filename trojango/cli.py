"""Command-line entry point."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from trojango import golog, log
from trojango.easy import EasyOption
from trojango.errors import TrojanError
from trojango.option import pop_option_handler, register_handler
from trojango.proxy_option import ConfigFileOption, StdinOption


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trojan-go", allow_abbrev=False)
    parser.add_argument("-config", "--config", default="",
                        help="Trojan-Go config filename (.yaml/.yml/.json)")
    parser.add_argument("-stdin-format", "--stdin-format", default="disabled",
                        help="Read from standard input (yaml/json)")
    parser.add_argument("-stdin-suppress-hint", "--stdin-suppress-hint", action="store_true",
                        help="Suppress hint text")
    parser.add_argument("-server", "--server", action="store_true",
                        help="Run a trojan-go server")
    parser.add_argument("-client", "--client", action="store_true",
                        help="Run a trojan-go client")
    parser.add_argument("-password", "--password", default="",
                        help="Password for authentication")
    parser.add_argument("-remote", "--remote", default="",
                        help="Remote address, e.g. 127.0.0.1:12345")
    parser.add_argument("-local", "--local", default="",
                        help="Local address, e.g. 127.0.0.1:12345")
    parser.add_argument("-key", "--key", default="server.key", help="Key of the server")
    parser.add_argument("-cert", "--cert", default="server.crt",
                        help="Certificates of the server")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Try each option handler by priority until one of them runs."""
    args = _build_parser().parse_args(argv)
    log.register_logger(golog.Logger(sys.stdout))

    register_handler(EasyOption(
        server=args.server, client=args.client, password=args.password,
        local=args.local, remote=args.remote, key=args.key, cert=args.cert,
    ))
    register_handler(StdinOption(args.stdin_format, args.stdin_suppress_hint))
    register_handler(ConfigFileOption(args.config))

    while True:
        try:
            handler = pop_option_handler()
        except TrojanError:
            log.fatal("invalid options")
            raise SystemExit(1)
        try:
            handler.handle()
        except TrojanError as exc:
            log.debug("option", handler.name(), "skipped:", exc)
            continue
        return 0


if __name__ == "__main__":
    raise SystemExit(main())