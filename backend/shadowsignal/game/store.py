from __future__ import annotations

import random
import string
from threading import RLock

from ..config import Config
from .models import Room


CODE_ALPHABET = string.ascii_uppercase + string.digits


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


class RoomStore:
    """In-memory room registry keyed by upper-cased room code.

    Rooms are handed out by reference. Anything that suspends (sleeps, calls
    the hint service) must call ``get`` again afterwards instead of holding on
    to the room it had before.
    """

    def __init__(self) -> None:
        # Shared by every component that mutates rooms. Held for a whole
        # action, never across a sleep or an external call.
        self.lock = RLock()
        self._rooms: dict[str, Room] = {}

    def get(self, code: str | None) -> Room | None:
        with self.lock:
            return self._rooms.get(normalize_code(code))

    def upsert(self, code: str, room: Room) -> None:
        if not room.players:
            raise ValueError(f"refusing to store empty room {code!r}")
        with self.lock:
            self._rooms[normalize_code(code)] = room

    def delete(self, code: str | None) -> bool:
        with self.lock:
            return self._rooms.pop(normalize_code(code), None) is not None

    def list_rooms(self) -> list[Room]:
        with self.lock:
            return list(self._rooms.values())

    def codes_containing(self, sid: str) -> list[str]:
        with self.lock:
            return [
                code
                for code, room in self._rooms.items()
                if any(p.sid == sid for p in room.players)
            ]

    def generate_code(self, rng: random.Random | None = None) -> str:
        rng = rng or random
        with self.lock:
            while True:
                code = "".join(rng.choice(CODE_ALPHABET) for _ in range(Config.ROOM_CODE_LENGTH))
                if code not in self._rooms:
                    return code

    def clear(self) -> None:
        with self.lock:
            self._rooms.clear()

    def __len__(self) -> int:
        with self.lock:
            return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        if not isinstance(code, str):
            return False
        with self.lock:
            return normalize_code(code) in self._rooms
