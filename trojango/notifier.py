"""A coalescing change notifier."""

from __future__ import annotations

import threading


class Notifier:
    """Producers signal changes; a consumer waits for them. Repeated signals coalesce."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pending = False

    def signal(self) -> None:
        """Record a change. Never blocks."""
        with self._cond:
            self._pending = True
            self._cond.notify()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for a change and consume it; False if ``timeout`` elapsed first."""
        with self._cond:
            if not self._cond.wait_for(lambda: self._pending, timeout):
                return False
            self._pending = False
            return True