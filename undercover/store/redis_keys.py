# undercover/store/redis_keys.py
from __future__ import annotations

from dataclasses import dataclass

ROOMS_INDEX = "rooms:by_created"  # ZSET room_code -> created_at


def connection_rooms(connection_id: str) -> str:
    return f"conn:{connection_id}:rooms"  # SET room_code


@dataclass(frozen=True)
class RK:
    """
    Redis Key builder for room-scoped keys.
    """
    room_code: str

    def room(self) -> str:
        return f"room:{self.room_code}"  # STRING RoomState JSON

    def connections(self) -> str:
        return f"room:{self.room_code}:connections"  # SET connection_id

    def all_room_keys(self) -> list[str]:
        """Keys that share the room's TTL."""
        return [self.room(), self.connections()]
