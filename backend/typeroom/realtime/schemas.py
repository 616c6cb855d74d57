from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..game.models import ALLOWED_DURATIONS, FinalResults, Progress


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")


class JoinRoomPayload(_Payload):
    room_id: str = Field(alias="roomId", min_length=1, max_length=64)
    username: str = Field(min_length=1, max_length=20)

    @field_validator("username")
    @classmethod
    def _printable(cls, v: str) -> str:
        if any(ord(ch) < 32 for ch in v):
            raise ValueError("username contains control characters")
        return v


class ConfigureTestPayload(_Payload):
    timer_duration: int = Field(alias="timerDuration", strict=True)

    @field_validator("timer_duration")
    @classmethod
    def _allowed(cls, v: int) -> int:
        if v not in ALLOWED_DURATIONS:
            raise ValueError(f"timerDuration must be one of {ALLOWED_DURATIONS}")
        return v


class SubmitResultsPayload(_Payload):
    wpm: float = Field(default=0, ge=0)
    raw_wpm: float = Field(default=0, alias="rawWpm", ge=0)
    accuracy: float = Field(default=0, ge=0, le=100)
    characters_typed: int = Field(default=0, alias="charactersTyped", ge=0)
    completion_percentage: float = Field(default=0, alias="completionPercentage", ge=0, le=100)

    def to_results(self) -> FinalResults:
        return FinalResults(
            wpm=self.wpm,
            raw_wpm=self.raw_wpm,
            accuracy=self.accuracy,
            characters_typed=self.characters_typed,
            completion_percentage=self.completion_percentage,
        )


class ProgressPayload(_Payload):
    wpm: float = Field(default=0, ge=0)
    accuracy: float = Field(default=100, ge=0, le=100)
    characters_typed: int = Field(default=0, alias="charactersTyped", ge=0)
    completion_percentage: float = Field(default=0, alias="completionPercentage", ge=0, le=100)

    def to_progress(self) -> Progress:
        return Progress(
            wpm=self.wpm,
            accuracy=self.accuracy,
            characters_typed=self.characters_typed,
            completion_percentage=self.completion_percentage,
        )
