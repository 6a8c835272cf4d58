from __future__ import annotations

from typing import Optional

from undercover.domain.common.errors import GameError
from undercover.domain.common.events import Result, error_result, room_payload
from undercover.transport.protocols import InStartGame, OutGameStarted


async def handle_start_game(*, app, conn_id: Optional[str], msg: InStartGame) -> Result:
    """
    Assign roles and words, then broadcast the whole room.
    Every player's word goes to everyone; clients only reveal the viewer's own.
    """
    try:
        room = await app.state.sessions.start_game(msg.room_code)
    except GameError as exc:
        return error_result(exc)

    return [], [OutGameStarted(room=room_payload(room))]
