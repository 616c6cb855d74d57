from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import ParticipantNotFound, RoomFull, TestInProgress
from .models import Participant, Room, now_ms

logger = logging.getLogger(__name__)


MAX_PARTICIPANTS = 8


@dataclass
class LeaveOutcome:
    participant: Participant
    room_empty: bool
    new_host_id: str | None = None


def ensure_can_join(room: Room, max_participants: int = MAX_PARTICIPANTS) -> None:
    if len(room.participants) >= max_participants:
        raise RoomFull()
    if room.phase in ("countdown", "test"):
        raise TestInProgress()


def join(
    room: Room,
    participant_id: str,
    username: str,
    max_participants: int = MAX_PARTICIPANTS,
) -> Participant:
    ensure_can_join(room, max_participants)

    # An empty room belongs to whoever arrives first.
    if not room.participants:
        room.host_id = participant_id

    participant = Participant(
        id=participant_id,
        username=username,
        is_host=participant_id == room.host_id,
    )
    room.participants[participant_id] = participant
    room.last_empty_at_ms = None
    logger.info("Participant %s added to room %s", username, room.id)
    return participant


def leave(room: Room, participant_id: str, at_ms: int | None = None) -> LeaveOutcome:
    participant = room.participants.pop(participant_id, None)
    if participant is None:
        raise ParticipantNotFound()

    if not room.participants:
        room.last_empty_at_ms = at_ms if at_ms is not None else now_ms()
        return LeaveOutcome(participant=participant, room_empty=True)

    new_host_id = None
    if room.host_id == participant_id:
        # Next in insertion order inherits the room.
        successor = next(iter(room.participants.values()))
        successor.is_host = True
        room.host_id = successor.id
        new_host_id = successor.id
        logger.info("Host transferred to %s in room %s", successor.username, room.id)

    return LeaveOutcome(participant=participant, room_empty=False, new_host_id=new_host_id)


def get_participant(room: Room, participant_id: str) -> Participant:
    participant = room.participants.get(participant_id)
    if participant is None:
        raise ParticipantNotFound()
    return participant


def toggle_ready(room: Room, participant_id: str) -> bool:
    participant = get_participant(room, participant_id)
    participant.is_ready = not participant.is_ready
    return participant.is_ready


def all_ready(room: Room) -> bool:
    return len(room.participants) >= 1 and all(p.is_ready for p in room.participants.values())


def all_submitted(room: Room) -> bool:
    return len(room.participants) >= 1 and all(
        p.final_results is not None for p in room.participants.values()
    )


def clear_round_state(room: Room) -> None:
    for p in room.participants.values():
        p.is_ready = False
        p.final_results = None
