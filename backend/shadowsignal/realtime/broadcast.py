from __future__ import annotations

import logging
from typing import Any

from flask_socketio import SocketIO, join_room

from ..game import machine
from ..game.models import Player, Room
from ..game.store import RoomStore

logger = logging.getLogger(__name__)


def _player_state(player: Player) -> dict:
    # Connection ids stay server-side.
    return {
        "guestId": player.guest_id,
        "name": player.name,
        "isHost": player.is_host,
        "role": player.role,
        "word": player.word,
        "isAlive": player.is_alive,
        "votes": player.votes,
        "hasVoted": player.has_voted,
    }


def room_snapshot(room: Room) -> dict:
    speaker = machine.current_speaker(room) if room.phase == "SPEAKING" else None
    return {
        "roomCode": room.code,
        "mode": room.mode,
        "phase": room.phase,
        "round": room.round,
        "players": [_player_state(p) for p in room.players],
        "secretWord": room.secret_word,
        "decoyWord": room.decoy_word,
        "currentSpeakerIndex": room.current_speaker_index,
        "currentSpeakerId": speaker.guest_id if speaker else None,
        "winner": room.winner,
        "lastEliminatedId": room.last_eliminated_id,
        "clues": [{"id": c.id, "sender": c.sender, "text": c.text} for c in room.clues],
    }


class SocketIOBroadcaster:
    """Pushes room snapshots to every connection in the room's Socket.IO room."""

    def __init__(self, socketio: SocketIO, store: RoomStore, namespace: str = "/") -> None:
        self._socketio = socketio
        self._store = store
        self._namespace = namespace

    def attach(self, sid: str, room_code: str) -> None:
        join_room(room_code, sid=sid, namespace=self._namespace)

    def broadcast(self, room_code: str) -> None:
        room = self._store.get(room_code)
        if room is None:
            return
        try:
            self._socketio.emit("GAME_STATE_UPDATE", room_snapshot(room), to=room.code, namespace=self._namespace)
        except Exception:
            logger.exception("Failed to broadcast state for room %s", room_code)

    def notify(self, to: str, event: str, payload: Any) -> None:
        try:
            self._socketio.emit(event, payload, to=to, namespace=self._namespace)
        except Exception:
            logger.exception("Failed to emit %s to %s", event, to)
