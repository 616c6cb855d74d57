from __future__ import annotations

import logging
from threading import RLock
from typing import Callable

from .errors import RoomAlreadyExists
from .models import Room, RoomConfig, now_ms

logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory map of room id -> Room.

    Only the session coordinator mutates it; the lock keeps the debug
    endpoints consistent when they read from another thread.
    """

    def __init__(self, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}

    def now(self) -> int:
        return self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def create(self, room_id: str, host_id: str, timer_duration: int = 30) -> Room:
        with self._lock:
            existing = self._rooms.get(room_id)
            if existing is not None and existing.participants:
                raise RoomAlreadyExists(f"Room {room_id} already exists")
            # An empty leftover is replaced by a fresh room for the new host.
            room = Room(
                id=room_id,
                host_id=host_id,
                config=RoomConfig(timer_duration=timer_duration),
                created_at=self._clock(),
            )
            room.last_empty_at_ms = room.created_at
            self._rooms[room_id] = room
            logger.info("Room %s created by %s", room_id, host_id)
            return room

    def get(self, room_id: str) -> Room | None:
        with self._lock:
            return self._rooms.get(room_id)

    def delete(self, room_id: str) -> bool:
        with self._lock:
            if room_id in self._rooms:
                del self._rooms[room_id]
                logger.info("Room %s deleted", room_id)
                return True
            return False

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def sweep_idle(self, max_idle_sec: int) -> list[str]:
        """Delete rooms that have been empty for longer than ``max_idle_sec``."""
        now = self._clock()
        removed: list[str] = []
        with self._lock:
            for room_id, room in list(self._rooms.items()):
                if room.participants:
                    continue
                empty_since = room.last_empty_at_ms or room.created_at
                if now - empty_since > max_idle_sec * 1000:
                    del self._rooms[room_id]
                    removed.append(room_id)
        if removed:
            logger.info("Swept %d idle room(s): %s", len(removed), ", ".join(removed))
        return removed

    def stats(self) -> dict:
        with self._lock:
            return {
                "totalRooms": len(self._rooms),
                "totalParticipants": sum(len(r.participants) for r in self._rooms.values()),
            }
