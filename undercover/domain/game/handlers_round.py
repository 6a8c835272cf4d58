from __future__ import annotations

from typing import Optional

from undercover.domain.common.errors import GameError
from undercover.domain.common.events import Result, error_result, player_payload, room_payload
from undercover.transport.protocols import InEndRound, OutRoundEnded


async def handle_end_round(*, app, conn_id: Optional[str], msg: InEndRound) -> Result:
    try:
        outcome = await app.state.sessions.end_round(msg.room_code)
    except GameError as exc:
        return error_result(exc)

    return [], [
        OutRoundEnded(
            room=room_payload(outcome.room),
            eliminated_player=player_payload(outcome.eliminated),
        )
    ]
