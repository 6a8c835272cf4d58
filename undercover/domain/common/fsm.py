from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Tuple

from undercover.domain.common.errors import InvalidTransition
from undercover.domain.common.types import RoomStatus

if TYPE_CHECKING:
    from undercover.store.models import RoomState


_TRANSITIONS: Dict[RoomStatus, Tuple[RoomStatus, ...]] = {
    RoomStatus.WAITING: (RoomStatus.PLAYING,),
    RoomStatus.PLAYING: (RoomStatus.FINISHED,),
    RoomStatus.FINISHED: (),
}


def can_transition_to(current: RoomStatus, target: RoomStatus) -> bool:
    """
    Validate status transitions. Only waiting -> playing -> finished.
    """
    if current not in _TRANSITIONS:
        raise InvalidTransition(f"Unknown room status {current!r}")
    return target in _TRANSITIONS[current]


def transition(room: "RoomState", target: RoomStatus) -> None:
    """Move `room` to `target`, raising InvalidTransition on an illegal step."""
    if not can_transition_to(room.status, target):
        raise InvalidTransition(f"Cannot move room from {room.status.value} to {target.value}")
    room.status = target
