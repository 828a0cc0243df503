from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import Config
from ..game import machine

if TYPE_CHECKING:
    from .controller import RoomController

logger = logging.getLogger(__name__)


class DisconnectCoordinator:
    """Removes a vanished connection from its room(s) and repairs the room."""

    def __init__(self, controller: "RoomController") -> None:
        self._controller = controller

    def disconnect(self, sid: str) -> list[str]:
        """Handle a transport disconnect. Returns the codes of rooms touched."""
        touched = []
        store = self._controller.store
        for code in store.codes_containing(sid):
            with store.lock:
                if self._leave(code, sid):
                    touched.append(code)
        return touched

    def _leave(self, code: str, sid: str) -> bool:
        store = self._controller.store
        timers = self._controller.timers

        room = store.get(code)
        if room is None:
            return False
        player = machine.find_by_sid(room, sid)
        if player is None:
            return False

        logger.info("Signal lost: %s from %s", player.name, code)

        was_speaker = room.phase == "SPEAKING" and machine.current_speaker(room) is player
        if was_speaker:
            timers.stop(code)
            machine.advance_speaker(room)

        machine.remove_player(room, sid)

        if not room.players:
            timers.stop(code)
            store.delete(code)
            logger.info("Room %s closed, no players left", code)
            return True

        alive_count = len(machine.alive_players(room))
        if was_speaker and alive_count > Config.TIMED_ROUND_MIN_ALIVE:
            timers.start(code)
        elif was_speaker:
            logger.info("Room %s down to %d alive, turn timer suspended", code, alive_count)

        if machine.clues_cover_alive(room):
            timers.stop(code)
            machine.enter_voting(room)
            logger.info("Room %s entered VOTING after disconnect", code)
        elif machine.voting_complete(room):
            self._controller.resolve_votes(room)
            return True

        self._controller.broadcaster.broadcast(code)
        return True
