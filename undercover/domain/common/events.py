"""
Common event builders.
Events are defined in undercover/transport/protocols.py; these helpers
build them from committed state so every handler serializes rooms the same way.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from undercover.domain.common.errors import GameError
from undercover.store.models import Player, RoomState
from undercover.transport.protocols import OutError, OutgoingEvent, OutRoomUpdate

# (to_sender, to_room)
Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


def room_payload(room: RoomState) -> Dict[str, Any]:
    return room.model_dump(mode="json")


def player_payload(player: Optional[Player]) -> Optional[Dict[str, Any]]:
    if player is None:
        return None
    return player.model_dump(mode="json")


def room_update(room: RoomState) -> OutRoomUpdate:
    return OutRoomUpdate(room=room_payload(room))


def error_result(exc: GameError) -> Result:
    return [OutError(code=exc.code, message=exc.message)], []
