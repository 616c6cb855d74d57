from __future__ import annotations

import logging
from dataclasses import asdict

from . import roster
from .errors import InvalidPhase, ResultsAlreadySubmitted
from .models import FinalResults, Participant, Phase, Progress, Room, now_ms
from .ranking import compute_rankings

logger = logging.getLogger(__name__)


# Allowed phase moves. setup -> setup is the host restart from the lobby.
_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "setup": ("countdown", "setup"),
    "countdown": ("test",),
    "test": ("results",),
    "results": ("setup",),
}


def _transition(room: Room, target: Phase) -> None:
    if target not in _TRANSITIONS[room.phase]:
        raise InvalidPhase(f"Cannot move from {room.phase} to {target}")
    logger.debug("Room %s: %s -> %s", room.id, room.phase, target)
    room.phase = target


def should_start_countdown(room: Room) -> bool:
    return room.phase == "setup" and roster.all_ready(room)


def begin_countdown(room: Room, seconds: int) -> int:
    _transition(room, "countdown")
    room.round += 1
    room.countdown_remaining = seconds
    return room.countdown_remaining


def tick_countdown(room: Room) -> int:
    if room.phase != "countdown":
        raise InvalidPhase()
    room.countdown_remaining = max(0, room.countdown_remaining - 1)
    return room.countdown_remaining


def start_test(room: Room, text: str) -> None:
    _transition(room, "test")
    room.config.test_text = text
    room.active_duration = room.config.timer_duration
    for p in room.participants.values():
        p.final_results = None
        p.current_progress = Progress()


def record_results(room: Room, participant_id: str, results: FinalResults) -> None:
    if room.phase != "test":
        raise InvalidPhase("Results can only be submitted during a test")
    participant = roster.get_participant(room, participant_id)
    if participant.final_results is not None:
        raise ResultsAlreadySubmitted()
    results.submitted_at = now_ms()
    participant.final_results = results


def update_progress(room: Room, participant_id: str, progress: Progress) -> bool:
    """Store live progress. Returns False when the room is not testing."""
    participant = roster.get_participant(room, participant_id)
    if room.phase != "test":
        return False
    participant.current_progress = progress
    return True


def force_complete(room: Room) -> list[str]:
    """Give zero results to everyone still missing them."""
    if room.phase != "test":
        raise InvalidPhase()
    ts = now_ms()
    filled = []
    for p in room.participants.values():
        if p.final_results is None:
            p.final_results = FinalResults.zero(ts)
            filled.append(p.id)
    return filled


def finish_test(room: Room) -> list[dict]:
    if not roster.all_submitted(room):
        raise InvalidPhase("Not every participant has results yet")
    _transition(room, "results")
    return compute_rankings(room.participants.values())


def can_restart(room: Room) -> bool:
    return room.phase in ("setup", "results")


def reset_to_setup(room: Room) -> None:
    _transition(room, "setup")
    roster.clear_round_state(room)
    room.countdown_remaining = 0
    room.config.test_text = ""


def _results_public(results: FinalResults | None) -> dict | None:
    if results is None:
        return None
    return {
        "wpm": results.wpm,
        "rawWpm": results.raw_wpm,
        "accuracy": results.accuracy,
        "charactersTyped": results.characters_typed,
        "completionPercentage": results.completion_percentage,
        "submittedAt": results.submitted_at,
    }


def progress_public(progress: Progress) -> dict:
    d = asdict(progress)
    return {
        "wpm": d["wpm"],
        "accuracy": d["accuracy"],
        "charactersTyped": d["characters_typed"],
        "completionPercentage": d["completion_percentage"],
    }


def participant_public_state(p: Participant) -> dict:
    return {
        "id": p.id,
        "username": p.username,
        "isReady": p.is_ready,
        "isHost": p.is_host,
        "currentProgress": progress_public(p.current_progress),
        "finalResults": _results_public(p.final_results),
    }


def config_public_state(room: Room) -> dict:
    return {
        "timerDuration": room.config.timer_duration,
        "testText": room.config.test_text,
    }


def room_public_state(room: Room) -> dict:
    return {
        "id": room.id,
        "hostId": room.host_id,
        "phase": room.phase,
        "config": config_public_state(room),
        "participants": [participant_public_state(p) for p in room.participants.values()],
        "createdAt": room.created_at,
        "round": room.round,
    }


def room_debug_summary(room: Room) -> dict:
    return {
        "id": room.id,
        "phase": room.phase,
        "participantCount": len(room.participants),
        "participants": [
            {
                "username": p.username,
                "isReady": p.is_ready,
                "hasResults": p.final_results is not None,
            }
            for p in room.participants.values()
        ],
    }
