"""Command-line option handlers, run in order of priority."""

from __future__ import annotations

import abc

from trojango.errors import TrojanError


class OptionHandler(abc.ABC):
    """A way of starting the program, selected by command-line options.

    ``handle`` returns normally once it has run, and raises to let the
    next handler in priority order have a go.
    """

    @abc.abstractmethod
    def name(self) -> str:
        """Unique name of the handler."""

    @abc.abstractmethod
    def handle(self) -> None:
        """Run the handler; raise if it does not apply."""

    @abc.abstractmethod
    def priority(self) -> int:
        """Handlers with a higher priority are tried first."""


_handlers: dict[str, OptionHandler] = {}


def register_handler(handler: OptionHandler) -> None:
    """Register ``handler``, replacing any handler of the same name."""
    _handlers[handler.name()] = handler


def pop_option_handler() -> OptionHandler:
    """Remove and return the registered handler with the highest priority."""
    best: OptionHandler | None = None
    for handler in _handlers.values():
        if best is None or best.priority() < handler.priority():
            best = handler
    if best is None:
        raise TrojanError("no option left")
    del _handlers[best.name()]
    return best