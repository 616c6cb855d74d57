from __future__ import annotations

from typing import Any

from flask import request
from flask_socketio import SocketIO

from ..utils.ip import get_client_ip
from .coordinator import SessionCoordinator


def _join_args(args: tuple) -> Any:
    # Browser clients send ("room", "name"); dict payloads are accepted too.
    if len(args) == 1 and isinstance(args[0], dict):
        return args[0]
    if len(args) >= 2:
        return {"roomId": args[0], "username": args[1]}
    if len(args) == 1:
        return {"roomId": args[0]}
    return {}


def _first(args: tuple) -> Any:
    return args[0] if args else None


def register_socketio_handlers(socketio: SocketIO, coordinator: SessionCoordinator) -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        coordinator.open_session(request.sid, address=get_client_ip(request))

    @socketio.on("join-room")
    def join_room_event(*args):
        coordinator.handle(request.sid, "join-room", _join_args(args))

    @socketio.on("configure-test")
    def configure_test(*args):
        coordinator.handle(request.sid, "configure-test", _first(args))

    @socketio.on("ready-toggle")
    def ready_toggle(*args):
        coordinator.handle(request.sid, "ready-toggle")

    @socketio.on("submit-results")
    def submit_results(*args):
        coordinator.handle(request.sid, "submit-results", _first(args))

    @socketio.on("update-progress")
    def update_progress(*args):
        coordinator.handle(request.sid, "update-progress", _first(args))

    @socketio.on("restart-room")
    def restart_room(*args):
        coordinator.handle(request.sid, "restart-room")

    @socketio.on("leave-room")
    def leave_room_event(*args):
        coordinator.handle(request.sid, "leave-room")

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        coordinator.handle(request.sid, "disconnect", str(reason) if reason is not None else None)
