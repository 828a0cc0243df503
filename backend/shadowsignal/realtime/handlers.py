from __future__ import annotations

import logging
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO, emit

from ..game.errors import GameError
from .controller import RoomController

logger = logging.getLogger(__name__)


def _field(payload: dict, key: str) -> str:
    value = payload.get(key, "")
    if value is None:
        return ""
    return str(value).strip()


def register_socketio_handlers(socketio: SocketIO, controller: RoomController) -> None:
    def _run(action: Callable[[], Any]) -> dict:
        try:
            room = action()
        except GameError as exc:
            emit("ERROR", exc.to_payload())
            return {"ok": False, "error": exc.code}
        return {"ok": True, "roomCode": room.code}

    @socketio.on("CREATE_ROOM")
    def create_room(data):
        payload = data or {}
        host_name = _field(payload, "hostName")
        guest_id = _field(payload, "guestId")
        mode = _field(payload, "mode") or "INFILTRATOR"

        return _run(lambda: controller.create_room(request.sid, host_name, guest_id, mode))

    @socketio.on("JOIN_ROOM")
    def join_room(data):
        payload = data or {}
        room_code = _field(payload, "roomCode")
        name = _field(payload, "name")
        guest_id = _field(payload, "guestId")

        if not room_code:
            emit("ERROR", {"error": "invalid_payload", "message": "Room code required."})
            return {"ok": False, "error": "invalid_payload"}

        return _run(lambda: controller.join_room(request.sid, room_code, name, guest_id))

    @socketio.on("START_GAME")
    def start_game(data):
        payload = data or {}
        room_code = _field(payload, "roomCode")

        return _run(lambda: controller.start_game(request.sid, room_code))

    @socketio.on("SEND_CLUE")
    def send_clue(data):
        payload = data or {}
        room_code = _field(payload, "roomCode")
        text = str(payload.get("text") or "")

        return _run(lambda: controller.send_clue(request.sid, room_code, text))

    @socketio.on("SUBMIT_VOTE")
    def submit_vote(data):
        payload = data or {}
        room_code = _field(payload, "roomCode")
        target_id = _field(payload, "targetId")

        if not target_id:
            emit("ERROR", {"error": "invalid_target", "message": "Vote target required."})
            return {"ok": False, "error": "invalid_target"}

        return _run(lambda: controller.submit_vote(request.sid, room_code, target_id))

    @socketio.on("disconnect")
    def on_disconnect(*args):
        touched = controller.disconnect(request.sid)
        if touched:
            logger.debug("Disconnect of %s touched rooms %s", request.sid, touched)
