# undercover/store/redis_repo.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from redis.asyncio import Redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from undercover.domain.common.errors import PersistenceFailure
from undercover.store.models import RoomState
from undercover.store.redis_keys import RK, ROOMS_INDEX, connection_rooms
from undercover.store.repo import ttl_for

logger = logging.getLogger(__name__)


class RedisRepo:
    def __init__(self, r: Redis, room_ttl_sec: int = 0, finished_ttl_sec: int = 300):
        self.r = r
        self.room_ttl_sec = room_ttl_sec
        self.finished_ttl_sec = finished_ttl_sec

    def _dec(self, x):
        """Decode redis bytes -> str; pass through str/None safely."""
        if x is None:
            return None
        if isinstance(x, bytes):
            return x.decode("utf-8")
        return x

    @asynccontextmanager
    async def _guard(self, op: str, room_code: str = "") -> AsyncIterator[None]:
        try:
            yield
        except (RedisError, ValidationError) as exc:
            # ValidationError: a corrupt or old-schema room blob
            logger.warning("redis %s failed for room %r: %s", op, room_code, exc)
            raise PersistenceFailure() from exc

    # ----------------------------
    # Rooms
    # ----------------------------
    async def find_room(self, room_code: str) -> Optional[RoomState]:
        async with self._guard("find_room", room_code):
            raw = await self.r.get(RK(room_code).room())
            if not raw:
                return None
            return RoomState.model_validate_json(self._dec(raw))

    async def save_room(self, room: RoomState) -> None:
        """
        Upsert the whole room in one MULTI/EXEC, keeping the
        connection -> rooms index in step with the player list.
        """
        rk = RK(room.room_code)
        ttl = ttl_for(room, self.room_ttl_sec, self.finished_ttl_sec)
        current = room.connection_ids()

        async with self._guard("save_room", room.room_code):
            previous = {self._dec(x) for x in await self.r.smembers(rk.connections())}

            pipe = self.r.pipeline(transaction=True)
            pipe.set(rk.room(), room.model_dump_json(), ex=ttl)
            pipe.delete(rk.connections())
            if current:
                pipe.sadd(rk.connections(), *current)
                if ttl is not None:
                    pipe.expire(rk.connections(), ttl)
            for cid in previous - current:
                pipe.srem(connection_rooms(cid), room.room_code)
            # no TTL on connection indexes: stale codes are pruned on lookup
            for cid in current:
                pipe.sadd(connection_rooms(cid), room.room_code)
            pipe.zadd(ROOMS_INDEX, {room.room_code: room.created_at})
            await pipe.execute()

    async def delete_room(self, room_code: str) -> bool:
        rk = RK(room_code)
        async with self._guard("delete_room", room_code):
            members = {self._dec(x) for x in await self.r.smembers(rk.connections())}

            pipe = self.r.pipeline(transaction=True)
            pipe.delete(*rk.all_room_keys())
            for cid in members:
                pipe.srem(connection_rooms(cid), room_code)
            pipe.zrem(ROOMS_INDEX, room_code)
            results = await pipe.execute()
        return bool(results[0])

    async def find_rooms_with_connection(self, connection_id: str) -> List[RoomState]:
        async with self._guard("find_rooms_with_connection"):
            codes = sorted(self._dec(x) for x in await self.r.smembers(connection_rooms(connection_id)))

        rooms: List[RoomState] = []
        stale: List[str] = []
        for code in codes:
            room = await self.find_room(code)
            # index entries can outlive an expired room
            if room is None:
                stale.append(code)
            elif room.find_by_connection(connection_id) is not None:
                rooms.append(room)

        if stale:
            async with self._guard("find_rooms_with_connection"):
                await self.r.srem(connection_rooms(connection_id), *stale)
        return rooms

    async def list_rooms(self, limit: int = 10) -> List[RoomState]:
        async with self._guard("list_rooms"):
            codes = [self._dec(x) for x in await self.r.zrevrange(ROOMS_INDEX, 0, -1)]

        rooms: List[RoomState] = []
        stale: List[str] = []
        for code in codes:
            if len(rooms) >= limit:
                break
            room = await self.find_room(code)
            if room is None:
                stale.append(code)
                continue
            rooms.append(room)

        if stale:
            async with self._guard("list_rooms"):
                await self.r.zrem(ROOMS_INDEX, *stale)
        return rooms
