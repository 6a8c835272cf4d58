from __future__ import annotations

from typing import Iterable, Optional

from undercover.domain.common.types import RoomStatus
from undercover.store.models import Player, RoomState


def normalize_name(name: str) -> str:
    """Key used for the case-insensitive display name comparison."""
    return (name or "").strip().casefold()


def name_taken(players: Iterable[Player], display_name: str) -> bool:
    key = normalize_name(display_name)
    return any(normalize_name(p.display_name) == key for p in players)


def is_waiting(room: Optional[RoomState]) -> bool:
    return room is not None and room.status == RoomStatus.WAITING


def is_playing(room: Optional[RoomState]) -> bool:
    return room is not None and room.status == RoomStatus.PLAYING


def can_vote(voter: Optional[Player]) -> bool:
    """Alive and has not voted yet this round."""
    return voter is not None and voter.alive and not voter.has_voted_this_round
