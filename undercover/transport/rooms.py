from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request

from undercover.domain.common.events import room_payload
from undercover.transport.protocols import OutError

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("")
async def list_rooms(request: Request, limit: int = Query(default=10, ge=1, le=100)):
    """
    Most recently created rooms first.
    """
    sessions = request.app.state.sessions
    wsman = request.app.state.wsman
    rooms = await sessions.list_rooms(limit)
    return {
        "rooms": [
            {
                "room_code": r.room_code,
                "status": r.status.value,
                "current_round": r.current_round,
                "players": len(r.players),
                "connected": sum(1 for p in r.players if p.connected),
                "subscribers": await wsman.room_size(r.room_code),
                "winner": r.winner.value,
                "created_at": r.created_at,
                "updated_at": r.updated_at,
            }
            for r in rooms
        ]
    }


@router.get("/{room_code}")
async def get_room(room_code: str, request: Request):
    room = await request.app.state.sessions.get_room(room_code)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return room_payload(room)


@router.delete("/{room_code}")
async def close_room(room_code: str, request: Request):
    """
    Delete a room. Subscribed clients get a ROOM_CLOSED error and are unsubscribed.
    """
    deleted = await request.app.state.sessions.close_room(room_code)
    if not deleted:
        raise HTTPException(status_code=404, detail="Room not found")

    wsman = request.app.state.wsman
    notice = OutError(code="ROOM_CLOSED", message="This room has been closed").model_dump()
    await wsman.broadcast(room_code, notice)
    await wsman.forget_room(room_code)
    return {"ok": True, "room_code": room_code}
