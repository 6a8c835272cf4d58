from __future__ import annotations

from typing import List, Optional

from undercover.domain.common.types import Role, Winner
from undercover.domain.common.validation import can_vote
from undercover.store.models import Player, RoomState


def record_vote(room: RoomState, voter_connection_id: str, target_connection_id: str) -> bool:
    """
    Apply one vote. Returns False (and changes nothing) when the voter is
    unknown, dead, or already voted this round, or the target is unknown.
    A repeated vote from the same voter is therefore a no-op.
    """
    voter = room.find_by_connection(voter_connection_id)
    target = room.find_by_connection(target_connection_id)
    if target is None or not can_vote(voter):
        return False

    target.vote_count += 1
    voter.has_voted_this_round = True
    return True


def pick_eliminated(players: List[Player]) -> Optional[Player]:
    """
    Alive player with the strictly highest vote count (> 0).
    Ties go to whoever comes first in list order.
    """
    eliminated: Optional[Player] = None
    max_votes = 0
    for p in players:
        if p.alive and p.vote_count > max_votes:
            max_votes = p.vote_count
            eliminated = p
    return eliminated


def reset_votes(players: List[Player]) -> None:
    for p in players:
        p.vote_count = 0
        p.has_voted_this_round = False


def resolve_round(players: List[Player]) -> Optional[Player]:
    """Eliminate the top-voted player (if any) and clear votes for the next round."""
    eliminated = pick_eliminated(players)
    if eliminated is not None:
        eliminated.alive = False
    reset_votes(players)
    return eliminated


def evaluate_winner(players: List[Player]) -> Winner:
    """
    Win check over alive players:
      - civilians: no undercover and no mr_white left
      - undercover: alive undercover >= alive civilians
      - otherwise nobody yet

    The undercover rule is applied literally: with only mr_white left
    (0 undercover, 0 civilians) it reports an undercover win.
    """
    alive = [p for p in players if p.alive]
    undercover = sum(1 for p in alive if p.role == Role.UNDERCOVER)
    civilians = sum(1 for p in alive if p.role == Role.CIVILIAN)
    mr_white = sum(1 for p in alive if p.role == Role.MR_WHITE)

    if undercover == 0 and mr_white == 0:
        return Winner.CIVILIANS
    if undercover >= civilians:
        return Winner.UNDERCOVER
    return Winner.NONE
