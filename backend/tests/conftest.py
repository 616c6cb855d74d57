import heapq
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

import pytest

from typeroom.config import Config
from typeroom.game.registry import RoomRegistry
from typeroom.realtime.coordinator import SessionCoordinator
from typeroom.realtime.scheduler import TimerHandle
from typeroom.server import create_app


TEST_TEXT = "alpha beta gamma delta"


class TestConfig(Config):
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret"
    SOCKETIO_ASYNC_MODE = "threading"
    TRUST_PROXY_HEADERS = False
    DEBUG_TOKEN = ""


class FakeClock:
    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.ms = start_ms

    def __call__(self) -> int:
        return self.ms

    def advance(self, seconds: float) -> None:
        self.ms += int(seconds * 1000)


class ManualScheduler:
    """Fake-time scheduler; callbacks only run inside ``advance``."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = 0

    def call_later(self, delay, callback, *args):
        handle = TimerHandle()
        self._seq += 1
        heapq.heappush(self._queue, (self.now + delay, self._seq, handle, callback, args))
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle, callback, args = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                callback(*args)
        self.now = target

    def pending(self) -> list[str]:
        return [
            args[0].name
            for _, _, handle, _, args in sorted(self._queue)
            if not handle.cancelled and args
        ]


@dataclass
class Sent:
    event: str
    args: tuple
    to: str
    skip_sid: Any = None


class RecordingBroadcaster:
    def __init__(self):
        self.sent: list[Sent] = []
        self.members: dict[str, set] = defaultdict(set)

    def emit(self, event, *args, to, skip_sid=None):
        self.sent.append(Sent(event, args, to, skip_sid))

    def join(self, sid, room_id):
        self.members[room_id].add(sid)

    def leave(self, sid, room_id):
        self.members[room_id].discard(sid)

    def of(self, event: str) -> list[Sent]:
        return [s for s in self.sent if s.event == event]

    def names(self) -> list[str]:
        return [s.event for s in self.sent]

    def errors_for(self, sid: str) -> list[str]:
        return [s.args[0]["error"] for s in self.sent if s.event == "error" and s.to == sid]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(clock):
    return RoomRegistry(clock=clock)


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def coordinator(registry, broadcaster, scheduler):
    return SessionCoordinator(
        registry,
        broadcaster,
        scheduler,
        text_factory=lambda: TEST_TEXT,
    )


@pytest.fixture()
def app_and_socketio(scheduler):
    return create_app(TestConfig, scheduler=scheduler, text_factory=lambda: TEST_TEXT)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(app_and_socketio):
    flask_app, socketio = app_and_socketio
    clients = []

    def _make():
        c = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
