from __future__ import annotations

from typing import Optional

from undercover.domain.common.errors import GameError
from undercover.domain.common.events import Result, error_result, room_payload
from undercover.transport.protocols import InVote, OutVoteUpdate


async def handle_vote(*, app, conn_id: Optional[str], msg: InVote) -> Result:
    # Rejected votes (dead voter, second vote, unknown target, no room) are
    # silent no-ops so redelivered messages are harmless.
    try:
        room = await app.state.sessions.cast_vote(msg.room_code, conn_id, msg.target_connection_id)
    except GameError as exc:
        return error_result(exc)

    if room is None:
        return [], []
    return [], [OutVoteUpdate(room=room_payload(room))]
