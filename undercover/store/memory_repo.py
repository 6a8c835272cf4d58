from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from undercover.store.models import RoomState
from undercover.store.repo import ttl_for
from undercover.util.timeutil import now_ts


class MemoryRepo:
    """
    Process-local room store (dev / tests / single-node).
    Rooms are copied on the way in and out so callers never share
    a reference with the stored document.
    """

    def __init__(
        self,
        room_ttl_sec: int = 0,
        finished_ttl_sec: int = 300,
        clock: Callable[[], int] = now_ts,
    ):
        self.room_ttl_sec = room_ttl_sec
        self.finished_ttl_sec = finished_ttl_sec
        self._clock = clock
        self._rooms: Dict[str, Tuple[RoomState, Optional[int]]] = {}  # code -> (room, expires_at or None)

    def _live(self, room_code: str) -> Optional[RoomState]:
        entry = self._rooms.get(room_code)
        if entry is None:
            return None
        room, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            self._rooms.pop(room_code, None)
            return None
        return room

    async def find_room(self, room_code: str) -> Optional[RoomState]:
        room = self._live(room_code)
        return room.model_copy(deep=True) if room is not None else None

    async def save_room(self, room: RoomState) -> None:
        ttl = ttl_for(room, self.room_ttl_sec, self.finished_ttl_sec)
        expires_at = self._clock() + ttl if ttl is not None else None
        self._rooms[room.room_code] = (room.model_copy(deep=True), expires_at)

    async def delete_room(self, room_code: str) -> bool:
        existed = self._live(room_code) is not None
        self._rooms.pop(room_code, None)
        return existed

    async def find_rooms_with_connection(self, connection_id: str) -> List[RoomState]:
        out: List[RoomState] = []
        for code in sorted(self._rooms):
            room = self._live(code)
            if room is not None and room.find_by_connection(connection_id) is not None:
                out.append(room.model_copy(deep=True))
        return out

    async def list_rooms(self, limit: int = 10) -> List[RoomState]:
        live = [r for r in (self._live(c) for c in list(self._rooms)) if r is not None]
        live.sort(key=lambda r: r.created_at, reverse=True)
        return [r.model_copy(deep=True) for r in live[:limit]]
