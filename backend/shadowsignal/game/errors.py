from __future__ import annotations


class GameError(Exception):
    """A rejected player action. Reported to the sender only; nothing was mutated."""

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message or code

    def to_payload(self) -> dict:
        return {"error": self.code, "message": self.message}
