from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal


Phase = Literal["setup", "countdown", "test", "results"]

ALLOWED_DURATIONS = (15, 30, 60, 120)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class FinalResults:
    wpm: float = 0
    raw_wpm: float = 0
    accuracy: float = 0
    characters_typed: int = 0
    completion_percentage: float = 0
    submitted_at: int = 0

    @classmethod
    def zero(cls, submitted_at: int) -> FinalResults:
        return cls(submitted_at=submitted_at)


@dataclass
class Progress:
    wpm: float = 0
    accuracy: float = 100
    characters_typed: int = 0
    completion_percentage: float = 0


@dataclass
class Participant:
    id: str
    username: str
    is_ready: bool = False
    is_host: bool = False
    current_progress: Progress = field(default_factory=Progress)
    final_results: FinalResults | None = None


@dataclass
class RoomConfig:
    timer_duration: int = 30
    test_text: str = ""


@dataclass
class Room:
    id: str
    host_id: str
    phase: Phase = "setup"
    config: RoomConfig = field(default_factory=RoomConfig)
    participants: dict[str, Participant] = field(default_factory=dict)
    created_at: int = field(default_factory=now_ms)
    last_empty_at_ms: int | None = None
    # Bumped on every countdown start; timers compare against it.
    round: int = 0
    countdown_remaining: int = 0
    # Duration locked in when the current test started.
    active_duration: int = 0
    timers: dict[str, Any] = field(default_factory=dict, repr=False)
