from __future__ import annotations

import itertools
import logging
from threading import RLock

from ..config import Config
from ..game import machine
from ..game.store import RoomStore, normalize_code

logger = logging.getLogger(__name__)


class TurnTimers:
    """At most one pending turn timeout per room.

    Background tasks can't be cancelled once sleeping, so each ``start`` hands
    its task a fresh generation number. A task that wakes up and finds a
    different (or no) generation registered for its room does nothing.
    """

    def __init__(self, store: RoomStore, scheduler, broadcaster, duration_sec: float | None = None) -> None:
        self._store = store
        self._scheduler = scheduler
        self._broadcaster = broadcaster
        self._duration_sec = Config.TURN_DURATION_SEC if duration_sec is None else duration_sec
        self._lock = RLock()
        self._active: dict[str, int] = {}
        self._generations = itertools.count(1)

    def start(self, room_code: str) -> int:
        code = normalize_code(room_code)
        with self._lock:
            generation = next(self._generations)
            self._active[code] = generation
        self._scheduler.spawn(self._run, code, generation)
        return generation

    def stop(self, room_code: str) -> None:
        with self._lock:
            self._active.pop(normalize_code(room_code), None)

    def is_active(self, room_code: str) -> bool:
        with self._lock:
            return normalize_code(room_code) in self._active

    def active_count(self) -> int:
        with self._lock:
            return len(self._active)

    def _claim(self, code: str, generation: int) -> bool:
        with self._lock:
            if self._active.get(code) != generation:
                return False
            del self._active[code]
            return True

    def _run(self, code: str, generation: int) -> None:
        self._scheduler.sleep(self._duration_sec)

        with self._store.lock:
            if not self._claim(code, generation):
                return

            room = self._store.get(code)
            if room is None or room.phase != "SPEAKING":
                logger.debug("Dropping stale turn timeout for %s", code)
                return

            speaker = machine.current_speaker(room)
            machine.advance_speaker(room)
            logger.info(
                "Turn timed out in %s, skipping %s",
                code,
                speaker.name if speaker else "nobody",
            )
            self._broadcaster.broadcast(code)
            self.start(code)
