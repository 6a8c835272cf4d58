# undercover/transport/dispatcher.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from undercover.transport.protocols import (
    parse_incoming,
    OutError,
    OutgoingEvent,
    InJoinRoom,
    InSendMessage,
    InStartGame,
    InVote,
    InEndRound,
    InSnapshot,
)
from undercover.domain.lifecycle.handlers import handle_join_room, handle_snapshot
from undercover.domain.chat.handlers import handle_send_message
from undercover.domain.game.handlers import handle_start_game, handle_vote, handle_end_round

logger = logging.getLogger(__name__)

DispatchResult = Tuple[Optional[str], List[Dict[str, Any]], List[Dict[str, Any]]]
# (room_code, to_sender_events, to_room_events), each event is a JSON dict

_HANDLERS = {
    InJoinRoom: handle_join_room,
    InSendMessage: handle_send_message,
    InStartGame: handle_start_game,
    InVote: handle_vote,
    InEndRound: handle_end_round,
    InSnapshot: handle_snapshot,
}


async def dispatch_message(
    *,
    app,
    conn_id: Optional[str],
    raw: Dict[str, Any],
) -> DispatchResult:
    """
    Transport layer calls this.
    - Parses + validates raw JSON
    - Routes to the domain handler for the message type
    - Returns (room_code, to_sender, to_room) with events as JSON dicts

    NOTE: This file contains NO store access and NO game rules.
    """
    try:
        msg = parse_incoming(raw)
    except (ValidationError, ValueError) as e:
        err = OutError(code="BAD_MESSAGE", message=str(e)).model_dump()
        return None, [err], []

    handler = _HANDLERS.get(type(msg))
    if handler is None:
        err = OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}").model_dump()
        return msg.room_code, [err], []

    to_sender, to_room = await handler(app=app, conn_id=conn_id, msg=msg)
    return msg.room_code, _dump(to_sender), _dump(to_room)


def _dump(events: List[OutgoingEvent]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts.
    """
    return [e.model_dump(mode="json") for e in events]
