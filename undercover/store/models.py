# undercover/store/models.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from undercover.domain.common.types import Role, RoomStatus, Winner


class Player(BaseModel):
    connection_id: str               # current transport session, rebound on reconnect
    identity_id: Optional[str] = None  # durable account ref; None for guests
    display_name: str
    role: Role = Role.UNASSIGNED
    secret_word: Optional[str] = None
    alive: bool = True
    vote_count: int = Field(default=0, ge=0)
    has_voted_this_round: bool = False
    connected: bool = True
    joined_at: int = 0

    @property
    def is_guest(self) -> bool:
        return not self.identity_id


class ChatMessage(BaseModel):
    author_connection_id: str
    author_display_name: str
    text: str
    sent_at: int


class RoomState(BaseModel):
    """
    Authoritative state of one game instance.
    Stored whole: the persistence layer upserts the full document.
    """
    room_code: str
    players: List[Player] = Field(default_factory=list)
    messages: List[ChatMessage] = Field(default_factory=list)
    status: RoomStatus = RoomStatus.WAITING
    current_round: int = Field(default=0, ge=0)
    civilian_word: Optional[str] = None
    undercover_word: Optional[str] = None
    winner: Winner = Winner.NONE
    created_at: int
    updated_at: int
    revision: int = 0

    def find_by_connection(self, connection_id: str) -> Optional[Player]:
        for p in self.players:
            if p.connection_id == connection_id:
                return p
        return None

    def find_by_identity(self, identity_id: str) -> Optional[Player]:
        if not identity_id:
            return None
        for p in self.players:
            if p.identity_id and p.identity_id == identity_id:
                return p
        return None

    def connection_ids(self) -> set[str]:
        return {p.connection_id for p in self.players}
