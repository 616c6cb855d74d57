"""
Session coordinator: the one place room state changes.

Client messages and timer expiries both arrive here as ``Event`` objects and
are handled one at a time under a single lock. A handler looks up the room
for the connection, checks who is asking, validates the payload, mutates the
room through ``game.service`` / ``game.roster`` and then broadcasts the result
to everyone in the room before the next event is processed.

Recoverable faults (``TypeRoomError``) go back to the sender as an ``error``
event and leave the room untouched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ValidationError

from ..game import roster, service
from ..game.errors import (
    InvalidConfig,
    InvalidPayload,
    InvalidPhase,
    NotAuthorized,
    RoomNotFound,
    TypeRoomError,
)
from ..game.models import Room
from ..game.registry import RoomRegistry
from ..game.words import generate_test_text
from .schemas import ConfigureTestPayload, JoinRoomPayload, ProgressPayload, SubmitResultsPayload

logger = logging.getLogger(__name__)


TIMER_COUNTDOWN = "countdown-tick"
TIMER_TEST_TIMEOUT = "test-timeout"
TIMER_ROUND_RESET = "round-reset"
TIMER_ROOM_SWEEP = "room-sweep"
TIMER_STATS = "stats-report"


@dataclass
class Session:
    """What the server knows about one connection."""

    connection_id: str
    room_id: str | None = None
    username: str | None = None
    address: str | None = None


@dataclass
class Event:
    name: str
    session: Session | None = None
    payload: Any = None
    # Timer events remember which room and round armed them.
    room: Room | None = None
    round: int = 0


class SessionCoordinator:
    def __init__(
        self,
        registry: RoomRegistry,
        broadcaster,
        scheduler,
        *,
        max_participants: int = roster.MAX_PARTICIPANTS,
        default_timer_duration: int = 30,
        countdown_sec: int = 5,
        submit_grace_sec: int = 5,
        results_reset_sec: int = 10,
        test_word_count: int = 200,
        room_idle_ttl_sec: int = 24 * 60 * 60,
        room_sweep_interval_sec: int = 3600,
        stats_interval_sec: int = 120,
        text_factory: Callable[[], str] | None = None,
    ):
        self.registry = registry
        self._broadcaster = broadcaster
        self._scheduler = scheduler
        self._lock = RLock()
        self._sessions: dict[str, Session] = {}
        self._maintenance_started = False

        self.max_participants = max_participants
        self.default_timer_duration = default_timer_duration
        self.countdown_sec = countdown_sec
        self.submit_grace_sec = submit_grace_sec
        self.results_reset_sec = results_reset_sec
        self.room_idle_ttl_sec = room_idle_ttl_sec
        self.room_sweep_interval_sec = room_sweep_interval_sec
        self.stats_interval_sec = stats_interval_sec
        self._text_factory = text_factory or (lambda: generate_test_text(test_word_count))

        self._handlers: dict[str, Callable[[Event], None]] = {
            "join-room": self._on_join_room,
            "configure-test": self._on_configure_test,
            "ready-toggle": self._on_ready_toggle,
            "submit-results": self._on_submit_results,
            "update-progress": self._on_update_progress,
            "restart-room": self._on_restart_room,
            "leave-room": self._on_leave_room,
            "disconnect": self._on_disconnect,
            TIMER_COUNTDOWN: self._on_countdown_tick,
            TIMER_TEST_TIMEOUT: self._on_test_timeout,
            TIMER_ROUND_RESET: self._on_round_reset,
            TIMER_ROOM_SWEEP: self._on_room_sweep,
            TIMER_STATS: self._on_stats_report,
        }

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        registry: RoomRegistry,
        broadcaster,
        scheduler,
        text_factory: Callable[[], str] | None = None,
    ) -> SessionCoordinator:
        return cls(
            registry,
            broadcaster,
            scheduler,
            max_participants=int(config.get("MAX_PARTICIPANTS", roster.MAX_PARTICIPANTS)),
            default_timer_duration=int(config.get("DEFAULT_TIMER_DURATION", 30)),
            countdown_sec=int(config.get("COUNTDOWN_SEC", 5)),
            submit_grace_sec=int(config.get("SUBMIT_GRACE_SEC", 5)),
            results_reset_sec=int(config.get("RESULTS_RESET_SEC", 10)),
            test_word_count=int(config.get("TEST_WORD_COUNT", 200)),
            room_idle_ttl_sec=int(config.get("ROOM_IDLE_TTL_SEC", 24 * 60 * 60)),
            room_sweep_interval_sec=int(config.get("ROOM_SWEEP_INTERVAL_SEC", 3600)),
            stats_interval_sec=int(config.get("STATS_LOG_INTERVAL_SEC", 120)),
            text_factory=text_factory,
        )

    # ---- sessions ----

    def open_session(self, connection_id: str, address: str | None = None) -> Session:
        with self._lock:
            session = Session(connection_id=connection_id, address=address)
            logger.info("User connected: %s from %s", connection_id, address or "unknown")
            self._sessions[connection_id] = session
            return session

    def get_session(self, connection_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(connection_id)
            if session is None:
                session = self.open_session(connection_id)
            return session

    # ---- entry point ----

    def handle(self, connection_id: str, name: str, payload: Any = None) -> None:
        self.dispatch(Event(name=name, session=self.get_session(connection_id), payload=payload))

    def dispatch(self, event: Event) -> None:
        handler = self._handlers.get(event.name)
        if handler is None:
            logger.warning("Ignoring unknown event %s", event.name)
            return

        with self._lock:
            try:
                handler(event)
            except TypeRoomError as exc:
                logger.info("Rejected %s from %s: %s", event.name, _who(event), exc.message)
                if event.session is not None:
                    self._emit("error", exc.to_payload(), to=event.session.connection_id)
            except Exception:
                logger.exception("Error handling %s from %s", event.name, _who(event))
                if event.session is not None:
                    self._emit(
                        "error",
                        {"error": "internal_error", "message": f"Failed to handle {event.name}"},
                        to=event.session.connection_id,
                    )

    def start_maintenance(self) -> None:
        with self._lock:
            if self._maintenance_started:
                return
            self._maintenance_started = True
        self._arm(TIMER_ROOM_SWEEP, self.room_sweep_interval_sec)
        self._arm(TIMER_STATS, self.stats_interval_sec)

    # ---- read-only views for HTTP ----

    def room_snapshot(self, room_id: str) -> dict | None:
        with self._lock:
            room = self.registry.get(room_id)
            return service.room_public_state(room) if room else None

    def debug_snapshot(self) -> dict:
        with self._lock:
            rooms = [service.room_debug_summary(r) for r in self.registry.list_rooms()]
            return {"rooms": rooms, "totalRooms": len(rooms)}

    # ---- client events ----

    def _on_join_room(self, event: Event) -> None:
        data = _parse(JoinRoomPayload, event.payload)
        session = event.session
        sid = session.connection_id

        room = self.registry.get(data.room_id)
        if room is not None and sid in room.participants:
            # Already here; just resend the snapshot.
            self._emit("room-joined", service.room_public_state(room), to=sid)
            return

        if room is not None:
            roster.ensure_can_join(room, self.max_participants)

        if session.room_id is not None:
            self._depart(session, disconnected=False)

        room = self.registry.get(data.room_id)
        if room is None:
            room = self.registry.create(data.room_id, sid, timer_duration=self.default_timer_duration)

        participant = roster.join(room, sid, data.username, self.max_participants)
        self._broadcaster.join(sid, room.id)
        session.room_id = room.id
        session.username = data.username

        self._emit("room-joined", service.room_public_state(room), to=sid)
        if len(room.participants) > 1:
            self._emit("participant-joined", service.participant_public_state(participant), to=room.id, skip_sid=sid)
        logger.info("%s (%s) joined room %s", data.username, sid, room.id)

    def _on_configure_test(self, event: Event) -> None:
        room = self._require_room(event.session)
        self._require_host(room, event.session)
        data = _parse(ConfigureTestPayload, event.payload, InvalidConfig)

        room.config.timer_duration = data.timer_duration
        self._emit("config-updated", service.config_public_state(room), to=room.id)
        logger.info("Host updated config in room %s: timerDuration=%s", room.id, data.timer_duration)

    def _on_ready_toggle(self, event: Event) -> None:
        room = self._require_room(event.session)
        sid = event.session.connection_id
        is_ready = roster.toggle_ready(room, sid)
        self._emit("ready-state-changed", sid, is_ready, to=room.id)

        if service.should_start_countdown(room):
            self._start_countdown(room)

    def _on_submit_results(self, event: Event) -> None:
        room = self._require_room(event.session)
        sid = event.session.connection_id
        roster.get_participant(room, sid)
        data = _parse(SubmitResultsPayload, event.payload)

        service.record_results(room, sid, data.to_results())
        logger.info("Results stored for %s in room %s: wpm=%s", event.session.username, room.id, data.wpm)

        if roster.all_submitted(room):
            self._complete_round(room)

    def _on_update_progress(self, event: Event) -> None:
        room = self._require_room(event.session)
        sid = event.session.connection_id
        data = _parse(ProgressPayload, event.payload)
        progress = data.to_progress()
        if not service.update_progress(room, sid, progress):
            # Late progress after the test ended is expected; drop it.
            return
        self._emit("progress-updated", sid, service.progress_public(progress), to=room.id, skip_sid=sid)

    def _on_restart_room(self, event: Event) -> None:
        room = self._require_room(event.session)
        self._require_host(room, event.session)
        if not service.can_restart(room):
            raise InvalidPhase("Cannot restart while a test is running")

        self._cancel_timers(room)
        service.reset_to_setup(room)
        self._emit("room-restarted", service.room_public_state(room), to=room.id)
        logger.info("Room %s restarted by host", room.id)

    def _on_leave_room(self, event: Event) -> None:
        self._depart(event.session, disconnected=False)

    def _on_disconnect(self, event: Event) -> None:
        session = event.session
        logger.info("User %s disconnected: %s", session.connection_id, event.payload)
        try:
            self._depart(session, disconnected=True)
        finally:
            self._sessions.pop(session.connection_id, None)

    # ---- timer events ----

    def _on_countdown_tick(self, event: Event) -> None:
        room = self._live_room(event, "countdown")
        if room is None:
            return
        remaining = service.tick_countdown(room)
        if remaining > 0:
            self._emit("countdown-update", remaining, to=room.id)
            self._arm(TIMER_COUNTDOWN, 1, room)
        else:
            self._start_test(room)

    def _on_test_timeout(self, event: Event) -> None:
        room = self._live_room(event, "test")
        if room is None:
            return
        filled = service.force_complete(room)
        logger.info("Force ending test in room %s; zero results for %d participant(s)", room.id, len(filled))
        self._complete_round(room)

    def _on_round_reset(self, event: Event) -> None:
        room = self._live_room(event, "results")
        if room is None:
            return
        service.reset_to_setup(room)
        self._emit("room-state-updated", service.room_public_state(room), to=room.id)
        logger.info("Room %s reset for next round", room.id)

    def _on_room_sweep(self, event: Event) -> None:
        try:
            self.registry.sweep_idle(self.room_idle_ttl_sec)
        finally:
            self._arm(TIMER_ROOM_SWEEP, self.room_sweep_interval_sec)

    def _on_stats_report(self, event: Event) -> None:
        try:
            stats = self.registry.stats()
            logger.info(
                "Server stats - Rooms: %d, Participants: %d",
                stats["totalRooms"],
                stats["totalParticipants"],
            )
        finally:
            self._arm(TIMER_STATS, self.stats_interval_sec)

    # ---- transitions ----

    def _start_countdown(self, room: Room) -> None:
        n = service.begin_countdown(room, self.countdown_sec)
        logger.info("All participants ready in room %s, starting countdown", room.id)
        self._emit("countdown-start", n, to=room.id)
        if n > 0:
            self._arm(TIMER_COUNTDOWN, 1, room)
        else:
            self._start_test(room)

    def _start_test(self, room: Room) -> None:
        text = self._text_factory()
        service.start_test(room, text)
        self._emit("test-start", text, room.active_duration, to=room.id)
        self._arm(TIMER_TEST_TIMEOUT, room.active_duration + self.submit_grace_sec, room)
        logger.info("Test started in room %s (%ss)", room.id, room.active_duration)

    def _complete_round(self, room: Room) -> None:
        self._cancel_timer(room, TIMER_TEST_TIMEOUT)
        rankings = service.finish_test(room)
        self._emit("room-state-updated", service.room_public_state(room), to=room.id)
        self._emit("final-rankings", rankings, to=room.id)
        self._arm(TIMER_ROUND_RESET, self.results_reset_sec, room)
        logger.info("Final rankings sent for room %s", room.id)

    def _depart(self, session: Session, disconnected: bool) -> None:
        room_id = session.room_id
        if room_id is None:
            return
        sid = session.connection_id
        session.room_id = None

        if not disconnected:
            self._broadcaster.leave(sid, room_id)

        room = self.registry.get(room_id)
        if room is None or sid not in room.participants:
            return

        outcome = roster.leave(room, sid, at_ms=self.registry.now())
        logger.info("%s left room %s", outcome.participant.username, room_id)

        if outcome.room_empty:
            self._cancel_timers(room)
            self.registry.delete(room_id)
            return

        self._emit("participant-left", sid, to=room_id)
        if outcome.new_host_id is not None:
            self._emit("host-changed", outcome.new_host_id, to=room_id)

        if room.phase == "test" and roster.all_submitted(room):
            self._complete_round(room)

    # ---- helpers ----

    def _require_room(self, session: Session) -> Room:
        if session.room_id is None:
            raise RoomNotFound()
        room = self.registry.get(session.room_id)
        if room is None:
            raise RoomNotFound(session.room_id)
        return room

    def _require_host(self, room: Room, session: Session) -> None:
        if session.connection_id != room.host_id:
            raise NotAuthorized()

    def _live_room(self, event: Event, phase: str) -> Room | None:
        """Return the timer's room if it is still current, else None."""
        room = event.room
        if room is None or self.registry.get(room.id) is not room:
            return None
        if room.round != event.round or room.phase != phase:
            logger.debug("Stale %s for room %s ignored", event.name, room.id)
            return None
        return room

    def _arm(self, name: str, delay: float, room: Room | None = None) -> None:
        event = Event(name=name, room=room, round=room.round if room else 0)
        handle = self._scheduler.call_later(delay, self.dispatch, event)
        if room is not None:
            room.timers[name] = handle

    def _cancel_timer(self, room: Room, name: str) -> None:
        handle = room.timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    def _cancel_timers(self, room: Room) -> None:
        for name in list(room.timers):
            self._cancel_timer(room, name)

    def _emit(self, event: str, *args: Any, to: str, skip_sid: str | None = None) -> None:
        self._broadcaster.emit(event, *args, to=to, skip_sid=skip_sid)


def _parse(model: type[BaseModel], payload: Any, error_cls: type[TypeRoomError] = InvalidPayload):
    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        if error_cls is InvalidPayload:
            err = exc.errors()[0]
            loc = ".".join(str(part) for part in err.get("loc", ())) or "payload"
            raise InvalidPayload(f"{loc}: {err.get('msg')}") from exc
        raise error_cls() from exc


def _who(event: Event) -> str:
    if event.session is not None:
        return event.session.username or event.session.connection_id
    if event.room is not None:
        return f"timer:{event.room.id}"
    return "timer"
