from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

bp = Blueprint("rooms", __name__)


def _coordinator():
    return current_app.extensions["typeroom"]


def _debug_authorized() -> bool:
    token = current_app.config.get("DEBUG_TOKEN", "")
    if not token:
        return True
    return request.headers.get("X-Debug-Token", "") == token


@bp.get("/rooms/<room_id>")
def get_room(room_id: str):
    snapshot = _coordinator().room_snapshot(room_id)
    if snapshot is None:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(snapshot)


@bp.get("/debug/rooms")
def debug_rooms():
    if not _debug_authorized():
        return jsonify({"error": "unauthorized"}), 401
    return jsonify(_coordinator().debug_snapshot())
