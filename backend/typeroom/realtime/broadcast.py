from __future__ import annotations

from typing import Any

from flask_socketio import SocketIO


class SocketIOBroadcaster:
    """Fans coordinator events out over Socket.IO rooms.

    Several positional values become several Socket.IO arguments, matching
    what browser clients listen for (e.g. ``test-start`` gets text, duration).
    """

    def __init__(self, socketio: SocketIO, namespace: str = "/"):
        self._socketio = socketio
        self._namespace = namespace

    def emit(self, event: str, *args: Any, to: str, skip_sid: str | None = None) -> None:
        if len(args) == 1:
            data: Any = args[0]
        else:
            data = tuple(args)
        self._socketio.emit(event, data, to=to, skip_sid=skip_sid, namespace=self._namespace)

    def join(self, sid: str, room_id: str) -> None:
        self._socketio.server.enter_room(sid, room_id, namespace=self._namespace)

    def leave(self, sid: str, room_id: str) -> None:
        self._socketio.server.leave_room(sid, room_id, namespace=self._namespace)
