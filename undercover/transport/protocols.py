# undercover/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =========================
# Incoming (Client -> Server)
# =========================

class InBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: str


class InRoomBase(InBase):
    room_code: str = Field(min_length=1, max_length=32)


class InJoinRoom(InRoomBase):
    type: Literal["join_room"] = "join_room"
    display_name: str = Field(min_length=1, max_length=24)
    identity_id: Optional[str] = Field(default=None, max_length=64)
    allow_create: bool = False


class InSendMessage(InRoomBase):
    type: Literal["send_message"] = "send_message"
    text: str = Field(min_length=1, max_length=500)
    # only used when the sender is not a member of the room
    display_name: str = Field(default="", max_length=24)


class InStartGame(InRoomBase):
    type: Literal["start_game"] = "start_game"


class InVote(InRoomBase):
    type: Literal["vote"] = "vote"
    target_connection_id: str = Field(min_length=1, max_length=64)


class InEndRound(InRoomBase):
    type: Literal["end_round"] = "end_round"


class InSnapshot(InRoomBase):
    type: Literal["snapshot"] = "snapshot"


IncomingMessage = Union[
    InJoinRoom,
    InSendMessage,
    InStartGame,
    InVote,
    InEndRound,
    InSnapshot,
]


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutHello(OutBase):
    type: Literal["hello"] = "hello"
    connection_id: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutRoomUpdate(OutBase):
    type: Literal["room_update"] = "room_update"
    room: Dict[str, Any]


class OutJoinSuccess(OutBase):
    type: Literal["join_success"] = "join_success"
    room: Dict[str, Any]
    reconnected: bool


class OutGameStarted(OutBase):
    type: Literal["game_started"] = "game_started"
    room: Dict[str, Any]


class OutNewMessage(OutBase):
    type: Literal["new_message"] = "new_message"
    room_code: str
    message: Dict[str, Any]


class OutVoteUpdate(OutBase):
    type: Literal["vote_update"] = "vote_update"
    room: Dict[str, Any]


class OutRoundEnded(OutBase):
    type: Literal["round_ended"] = "round_ended"
    room: Dict[str, Any]
    eliminated_player: Optional[Dict[str, Any]] = None


class OutPlayerDisconnected(OutBase):
    type: Literal["player_disconnected"] = "player_disconnected"
    room_code: str
    connection_id: str
    display_name: str
    can_reconnect: bool


OutgoingEvent = Union[
    OutHello,
    OutError,
    OutRoomUpdate,
    OutJoinSuccess,
    OutGameStarted,
    OutNewMessage,
    OutVoteUpdate,
    OutRoundEnded,
    OutPlayerDisconnected,
]


# =========================
# Parser helpers
# =========================

_INCOMING_BY_TYPE = {
    "join_room": InJoinRoom,
    "send_message": InSendMessage,
    "start_game": InStartGame,
    "vote": InVote,
    "end_round": InEndRound,
    "snapshot": InSnapshot,
}


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValueError for an unknown/missing type, ValidationError if invalid.
    """
    if not isinstance(payload, dict):
        raise ValueError("Message must be a JSON object")

    t = payload.get("type")
    if not isinstance(t, str):
        raise ValueError("Missing/invalid type")

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise ValueError(f"Unknown message type: {t}")

    return cls.model_validate(payload)
