"""
Game errors.

Domain code raises these; handlers turn them into an `error` event that goes
to the originating connection only. None of them is fatal to a room.
"""
from __future__ import annotations


class GameError(Exception):
    """Base class for every user-facing game error."""

    code = "GAME_ERROR"
    default_message = "Game error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class RoomNotFound(GameError):
    code = "ROOM_NOT_FOUND"

    def __init__(self, room_code: str):
        self.room_code = room_code
        super().__init__("Room not found. Please check the room code.")


class GameAlreadyStarted(GameError):
    code = "GAME_ALREADY_STARTED"
    default_message = "Game has already started. Cannot join."


class NameTaken(GameError):
    code = "NAME_TAKEN"

    def __init__(self, display_name: str):
        self.display_name = display_name
        super().__init__("This name is already taken in the room. Please choose another name.")


class InsufficientPlayers(GameError):
    code = "INSUFFICIENT_PLAYERS"

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(f"Need at least {required} players to start")


class GameNotInProgress(GameError):
    code = "GAME_NOT_IN_PROGRESS"
    default_message = "No game is in progress in this room"


class InvalidTransition(GameError):
    code = "INVALID_TRANSITION"


class PersistenceFailure(GameError):
    code = "PERSISTENCE_FAILURE"
    default_message = "Could not save the room. Please try again."


class ConnectionInUse(GameError):
    code = "CONNECTION_IN_USE"
    default_message = "This connection already plays as someone else in the room"
