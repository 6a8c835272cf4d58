"""
Presence / reconnection rules.

Maps transient connection ids onto durable player records:
  - a join carrying a known identity_id is a reconnection (any room status)
  - a disconnecting guest in a waiting room is removed and frees its name
  - anyone else stays in place, marked disconnected, and may come back
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from undercover.domain.common.types import RoomStatus
from undercover.store.models import Player, RoomState


class DisconnectAction(str, Enum):
    REMOVE = "remove"
    KEEP = "keep"


def find_reconnect_target(room: RoomState, identity_id: Optional[str]) -> Optional[Player]:
    if not identity_id:
        return None
    return room.find_by_identity(identity_id)


def rebind_connection(player: Player, connection_id: str) -> None:
    """Point a durable player record at a new connection. Game state is untouched."""
    player.connection_id = connection_id
    player.connected = True


def classify_disconnect(room: RoomState, player: Player) -> DisconnectAction:
    if room.status == RoomStatus.WAITING and player.is_guest:
        return DisconnectAction.REMOVE
    return DisconnectAction.KEEP


def can_reconnect(player: Player) -> bool:
    return not player.is_guest


def remove_player(room: RoomState, connection_id: str) -> Optional[Player]:
    for i, p in enumerate(room.players):
        if p.connection_id == connection_id:
            return room.players.pop(i)
    return None
