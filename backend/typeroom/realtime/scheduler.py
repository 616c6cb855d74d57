from __future__ import annotations

import logging
from typing import Any, Callable

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)


class TimerHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    """Runs delayed callbacks as Socket.IO background tasks.

    Works with whatever async mode the server picked (eventlet greenlets or
    plain threads) since it only uses ``socketio.sleep``.
    """

    def __init__(self, socketio: SocketIO):
        self._socketio = socketio

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        handle = TimerHandle()

        def _runner() -> None:
            self._socketio.sleep(delay)
            if handle.cancelled:
                return
            try:
                callback(*args)
            except Exception:
                logger.exception("Timer callback %r failed", callback)

        self._socketio.start_background_task(_runner)
        return handle
