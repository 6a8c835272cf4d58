from __future__ import annotations

from typing import List, Optional, Protocol

from undercover.domain.common.types import RoomStatus
from undercover.store.models import RoomState


class RoomRepo(Protocol):
    """
    Persistence collaborator used by the session manager.
    Every method may raise PersistenceFailure.
    """

    async def find_room(self, room_code: str) -> Optional[RoomState]: ...

    async def save_room(self, room: RoomState) -> None: ...

    async def delete_room(self, room_code: str) -> bool: ...

    async def find_rooms_with_connection(self, connection_id: str) -> List[RoomState]: ...

    async def list_rooms(self, limit: int = 10) -> List[RoomState]: ...


def ttl_for(room: RoomState, room_ttl_sec: int, finished_ttl_sec: int) -> Optional[int]:
    """
    Seconds until the room expires, or None for no expiry.
    Finished rooms only linger for the grace period; live rooms are kept
    until they finish unless an idle TTL is configured.
    """
    if room.status == RoomStatus.FINISHED:
        return finished_ttl_sec
    return room_ttl_sec if room_ttl_sec > 0 else None
