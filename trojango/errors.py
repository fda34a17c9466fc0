"""Error type shared across the package."""

from __future__ import annotations


class TrojanError(Exception):
    """An error whose message can be extended with the cause that produced it."""

    def __init__(self, info: str = "") -> None:
        super().__init__(info)
        self.info = info

    def base(self, err: BaseException | None) -> "TrojanError":
        """Append the text of ``err`` to this error's message and return self."""
        if err is not None:
            self.info += " | " + str(err)
            self.args = (self.info,)
        return self

    def __str__(self) -> str:
        return self.info