# undercover/transport/ws.py
from __future__ import annotations

import ipaddress
import logging
import uuid
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from undercover.settings import get_settings
from undercover.domain.lifecycle.handlers import handle_disconnect
from undercover.transport.dispatcher import dispatch_message
from undercover.transport.protocols import OutError, OutHello
from undercover.transport.ws_manager import WSManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_private_ip(host: str) -> bool:
    """Return True if host is a private IP (192.168.x.x, 10.x.x.x, 172.16-31.x.x)."""
    try:
        ip = ipaddress.ip_address(host)
        return ip.is_private
    except ValueError:
        return False


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = getattr(websocket.app.state, "settings", None) or get_settings()
    allowed = {o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()}

    origin = websocket.headers.get("origin")
    if origin is None or "*" in allowed or origin in allowed:
        return True
    if settings.WS_ALLOW_LAN_ORIGINS:
        o = urlparse(origin)
        if _is_private_ip(o.hostname or ""):
            return True
    await websocket.close(code=1008)
    return False


async def deliver(
    wsman: WSManager,
    conn_id: str,
    room_code: Optional[str],
    to_sender: List[Dict[str, Any]],
    to_room: List[Dict[str, Any]],
) -> None:
    """Room broadcast first (sender included), then personal events."""
    if room_code:
        for e in to_room:
            await wsman.broadcast(room_code, e)
    for e in to_sender:
        await wsman.send_to(conn_id, e)


@router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket):
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    conn_id = uuid.uuid4().hex[:12]
    app = websocket.app
    wsman: WSManager = app.state.wsman
    await wsman.connect(conn_id, websocket)
    await websocket.send_json(OutHello(connection_id=conn_id).model_dump())

    try:
        while True:
            try:
                raw = await websocket.receive_json()
            except ValueError:
                err = OutError(code="BAD_MESSAGE", message="Message must be JSON").model_dump()
                await websocket.send_json(err)
                continue

            try:
                room_code, to_sender, to_room = await dispatch_message(app=app, conn_id=conn_id, raw=raw)
            except Exception:
                # a broken handler must not take the connection down
                logger.exception("unhandled error while dispatching %r", raw.get("type") if isinstance(raw, dict) else raw)
                err = OutError(code="INTERNAL", message="Something went wrong").model_dump()
                await websocket.send_json(err)
                continue

            await deliver(wsman, conn_id, room_code, to_sender, to_room)

    except WebSocketDisconnect:
        pass

    finally:
        await wsman.disconnect(conn_id)
        try:
            for room_code, to_room in await handle_disconnect(app=app, conn_id=conn_id):
                for e in to_room:
                    await wsman.broadcast(room_code, e.model_dump(mode="json"))
        except Exception:
            logger.exception("disconnect cleanup failed for %s", conn_id)
