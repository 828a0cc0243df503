from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..realtime.broadcast import room_snapshot

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    room = current_app.extensions["shadowsignal"].store.get(code)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(room_snapshot(room))
