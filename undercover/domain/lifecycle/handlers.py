# undercover/domain/lifecycle/handlers.py
from __future__ import annotations

from typing import List, Optional, Tuple

from undercover.domain.common.errors import GameError
from undercover.domain.common.events import Result, error_result, room_payload, room_update
from undercover.transport.protocols import (
    InJoinRoom,
    InSnapshot,
    OutgoingEvent,
    OutJoinSuccess,
    OutPlayerDisconnected,
)


async def handle_join_room(*, app, conn_id: Optional[str], msg: InJoinRoom) -> Result:
    """
    Join (or create / rejoin):
    - commit through the session manager
    - subscribe the connection to the room's broadcasts
    - broadcast the full room; personal join_success to the joiner
    """
    sessions = app.state.sessions
    try:
        outcome = await sessions.create_or_join(
            msg.room_code,
            conn_id,
            msg.display_name,
            identity_id=msg.identity_id,
            allow_create=msg.allow_create,
        )
    except GameError as exc:
        return error_result(exc)

    wsman = getattr(app.state, "wsman", None)
    if wsman is not None:
        await wsman.join(conn_id, msg.room_code)

    to_sender = [OutJoinSuccess(room=room_payload(outcome.room), reconnected=outcome.reconnected)]
    return to_sender, [room_update(outcome.room)]


async def handle_snapshot(*, app, conn_id: Optional[str], msg: InSnapshot) -> Result:
    """Full room state to the caller only, for clients that missed broadcasts."""
    try:
        room = await app.state.sessions.snapshot(msg.room_code)
    except GameError as exc:
        return error_result(exc)
    return [room_update(room)], []


async def handle_disconnect(*, app, conn_id: Optional[str]) -> List[Tuple[str, List[OutgoingEvent]]]:
    """
    Called by transport when a connection goes away.
    Returns (room_code, to_room) pairs, one per affected room that still exists.
    """
    if not conn_id:
        return []

    outcomes = await app.state.sessions.handle_disconnect(conn_id)

    out: List[Tuple[str, List[OutgoingEvent]]] = []
    for o in outcomes:
        if o.room is None:
            continue
        if o.removed:
            out.append((o.room_code, [room_update(o.room)]))
        else:
            out.append((
                o.room_code,
                [OutPlayerDisconnected(
                    room_code=o.room_code,
                    connection_id=o.player.connection_id,
                    display_name=o.player.display_name,
                    can_reconnect=o.can_reconnect,
                )],
            ))
    return out
