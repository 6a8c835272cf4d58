from __future__ import annotations

from .handlers import (
    handle_start_game,
    handle_vote,
    handle_end_round,
)

__all__ = [
    "handle_start_game",
    "handle_vote",
    "handle_end_round",
]
