import pytest

from undercover.domain.common.errors import InvalidTransition
from undercover.domain.common.fsm import can_transition_to, transition
from undercover.domain.common.types import RoomStatus
from undercover.store.models import RoomState


def test_forward_transitions_only():
    assert can_transition_to(RoomStatus.WAITING, RoomStatus.PLAYING) is True
    assert can_transition_to(RoomStatus.PLAYING, RoomStatus.FINISHED) is True

    assert can_transition_to(RoomStatus.WAITING, RoomStatus.FINISHED) is False
    assert can_transition_to(RoomStatus.PLAYING, RoomStatus.WAITING) is False
    assert can_transition_to(RoomStatus.FINISHED, RoomStatus.PLAYING) is False
    assert can_transition_to(RoomStatus.FINISHED, RoomStatus.WAITING) is False


def test_every_status_has_a_rule():
    for status in RoomStatus:
        for target in RoomStatus:
            can_transition_to(status, target)


def test_transition_rejects_regression():
    room = RoomState(room_code="R1", status=RoomStatus.FINISHED, created_at=0, updated_at=0)
    with pytest.raises(InvalidTransition):
        transition(room, RoomStatus.PLAYING)
    assert room.status == RoomStatus.FINISHED


def test_transition_applies():
    room = RoomState(room_code="R1", created_at=0, updated_at=0)
    transition(room, RoomStatus.PLAYING)
    assert room.status == RoomStatus.PLAYING
