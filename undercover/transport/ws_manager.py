# undercover/transport/ws_manager.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WSManager:
    """
    In-memory connection registry.
    - connection_id -> websocket
    - room_code -> {connection_id}
    Transport-only: no store, no game rules. Delivery is best-effort.
    """
    def __init__(self) -> None:
        self._conns: Dict[str, WebSocket] = {}
        self._rooms: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, conn_id: str, ws: WebSocket) -> None:
        async with self._lock:
            self._conns[conn_id] = ws

    async def disconnect(self, conn_id: str) -> None:
        async with self._lock:
            self._conns.pop(conn_id, None)
            for code in list(self._rooms):
                members = self._rooms[code]
                members.discard(conn_id)
                if not members:
                    self._rooms.pop(code, None)

    async def join(self, conn_id: str, room_code: str) -> None:
        async with self._lock:
            self._rooms.setdefault(room_code, set()).add(conn_id)

    async def send_to(self, conn_id: str, event: Dict[str, Any]) -> None:
        async with self._lock:
            ws = self._conns.get(conn_id)
        if ws is None:
            return
        try:
            await ws.send_json(event)
        except Exception as exc:
            # dead socket; ws.py cleans up on disconnect
            logger.debug("send to %s failed: %s", conn_id, exc)

    async def broadcast(self, room_code: str, event: Dict[str, Any]) -> None:
        # copy conns under lock, send outside lock
        async with self._lock:
            targets: List[tuple[str, WebSocket]] = [
                (cid, self._conns[cid]) for cid in self._rooms.get(room_code, set()) if cid in self._conns
            ]

        for cid, ws in targets:
            try:
                await ws.send_json(event)
            except Exception as exc:
                logger.debug("broadcast to %s in room %s failed: %s", cid, room_code, exc)

    async def forget_room(self, room_code: str) -> None:
        """Drop every subscription to a room. Sockets stay open for their other rooms."""
        async with self._lock:
            self._rooms.pop(room_code, None)

    async def room_size(self, room_code: str) -> int:
        async with self._lock:
            return len(self._rooms.get(room_code, set()))
