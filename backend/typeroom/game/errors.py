"""
Client-visible faults raised by the room layer.

Every error carries a stable ``code`` that is sent to the originating
connection in an ``error`` event; room state is left untouched.
"""


class TypeRoomError(Exception):
    """Base class for all recoverable room errors."""

    code = "error"
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"error": self.code, "message": self.message}


# ============ Room ============

class RoomNotFound(TypeRoomError):
    code = "room_not_found"
    default_message = "Room not found"

    def __init__(self, room_id: str | None = None):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found" if room_id else None)


class RoomAlreadyExists(TypeRoomError):
    """A non-empty room already owns this id."""

    code = "room_exists"
    default_message = "Room already exists"


class RoomFull(TypeRoomError):
    code = "room_full"
    default_message = "Room is full"


class TestInProgress(TypeRoomError):
    code = "test_in_progress"
    default_message = "Cannot join room during active test"

    # Keep pytest from collecting this when imported into test modules.
    __test__ = False


# ============ Participant ============

class ParticipantNotFound(TypeRoomError):
    code = "participant_not_found"
    default_message = "Participant not found in room"


class NotAuthorized(TypeRoomError):
    code = "not_authorized"
    default_message = "Only the host can do that"


# ============ Payload / phase ============

class InvalidConfig(TypeRoomError):
    code = "invalid_config"
    default_message = "Invalid timer duration"


class InvalidPayload(TypeRoomError):
    code = "invalid_payload"
    default_message = "Invalid payload"


class InvalidPhase(TypeRoomError):
    code = "invalid_phase"
    default_message = "Action not allowed in the current phase"


class ResultsAlreadySubmitted(TypeRoomError):
    code = "results_already_submitted"
    default_message = "Results already submitted for this round"
