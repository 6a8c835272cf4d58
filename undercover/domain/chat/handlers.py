from __future__ import annotations

import logging
from typing import Optional

from undercover.domain.common.errors import GameError
from undercover.domain.common.events import Result, error_result
from undercover.transport.protocols import InSendMessage, OutNewMessage

logger = logging.getLogger(__name__)


async def handle_send_message(*, app, conn_id: Optional[str], msg: InSendMessage) -> Result:
    """
    Chat is best-effort: a message to a missing room is dropped silently.
    """
    try:
        message = await app.state.sessions.post_message(
            msg.room_code,
            conn_id,
            msg.text,
            display_name=msg.display_name,
        )
    except GameError as exc:
        logger.warning("chat message to room %s dropped: %s", msg.room_code, exc)
        return error_result(exc)

    if message is None:
        return [], []
    return [], [OutNewMessage(room_code=msg.room_code, message=message.model_dump(mode="json"))]
