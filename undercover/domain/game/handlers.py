# undercover/domain/game/handlers.py
from __future__ import annotations

from undercover.domain.game.handlers_start import handle_start_game
from undercover.domain.game.handlers_vote import handle_vote
from undercover.domain.game.handlers_round import handle_end_round

__all__ = [
    "handle_start_game",
    "handle_vote",
    "handle_end_round",
]
