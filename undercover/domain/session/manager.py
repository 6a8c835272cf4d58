"""
Room session manager.

Owns the per-room serialization handles and every mutating operation.
Each operation runs load -> mutate -> save under the room's lock, so two
mutations of one room never interleave. The room is mutated on a private
copy loaded from the store; if the save fails nothing has changed.

Operations only commit. Building and delivering events is the caller's job.
"""
from __future__ import annotations

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence

from undercover.domain.common.errors import (
    ConnectionInUse,
    GameAlreadyStarted,
    GameError,
    GameNotInProgress,
    NameTaken,
    RoomNotFound,
)
from undercover.domain.common.fsm import transition
from undercover.domain.common.types import RoomStatus, Winner
from undercover.domain.common.validation import is_playing, is_waiting, name_taken
from undercover.domain.helpers.role_pick import MIN_PLAYERS, assign_roles
from undercover.domain.helpers.voting import evaluate_winner, record_vote, resolve_round
from undercover.domain.helpers.word_pairs import DEFAULT_WORD_PAIRS, WordPair
from undercover.domain.lifecycle.presence import (
    DisconnectAction,
    can_reconnect,
    classify_disconnect,
    find_reconnect_target,
    rebind_connection,
    remove_player,
)
from undercover.store.models import ChatMessage, Player, RoomState
from undercover.store.repo import RoomRepo
from undercover.util.timeutil import now_ts

logger = logging.getLogger(__name__)


@dataclass
class JoinOutcome:
    room: RoomState
    player: Player
    reconnected: bool


@dataclass
class RoundOutcome:
    room: RoomState
    eliminated: Optional[Player]


@dataclass
class DisconnectOutcome:
    room_code: str
    player: Player
    removed: bool
    room: Optional[RoomState]  # None when the room was deleted
    can_reconnect: bool


class _RoomSlot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class RoomSessionManager:
    def __init__(
        self,
        repo: RoomRepo,
        *,
        catalog: Sequence[WordPair] = DEFAULT_WORD_PAIRS,
        rng: Optional[random.Random] = None,
        min_players: int = MIN_PLAYERS,
        clock: Callable[[], int] = now_ts,
    ):
        self.repo = repo
        self.catalog = list(catalog)
        self.rng = rng or random.Random()
        self.min_players = min_players
        self._clock = clock
        self._slots: Dict[str, _RoomSlot] = {}

    # ----------------------------
    # Serialization
    # ----------------------------
    @asynccontextmanager
    async def serialized(self, room_code: str) -> AsyncIterator[None]:
        """
        Exclusive section for one room. Slots are refcounted so a lock is
        only dropped once nobody holds or waits on it.
        """
        slot = self._slots.get(room_code)
        if slot is None:
            slot = self._slots[room_code] = _RoomSlot()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0 and self._slots.get(room_code) is slot:
                del self._slots[room_code]

    def active_locks(self) -> int:
        return len(self._slots)

    async def _commit(self, room: RoomState) -> RoomState:
        room.updated_at = self._clock()
        room.revision += 1
        await self.repo.save_room(room)
        return room

    async def _load(self, room_code: str) -> RoomState:
        room = await self.repo.find_room(room_code)
        if room is None:
            raise RoomNotFound(room_code)
        return room

    def _new_player(self, connection_id: str, display_name: str, identity_id: Optional[str]) -> Player:
        return Player(
            connection_id=connection_id,
            identity_id=identity_id or None,
            display_name=display_name,
            joined_at=self._clock(),
        )

    # ----------------------------
    # Operations
    # ----------------------------
    async def create_or_join(
        self,
        room_code: str,
        connection_id: str,
        display_name: str,
        identity_id: Optional[str] = None,
        allow_create: bool = False,
    ) -> JoinOutcome:
        async with self.serialized(room_code):
            room = await self.repo.find_room(room_code)

            if room is None:
                if not allow_create:
                    raise RoomNotFound(room_code)
                ts = self._clock()
                player = self._new_player(connection_id, display_name, identity_id)
                room = RoomState(room_code=room_code, players=[player], created_at=ts, updated_at=ts)
                await self._commit(room)
                logger.info("room %s created by %s", room_code, display_name)
                return JoinOutcome(room=room, player=player, reconnected=False)

            existing = find_reconnect_target(room, identity_id)
            if existing is not None:
                holder = room.find_by_connection(connection_id)
                if holder is not None and holder is not existing:
                    raise ConnectionInUse()
                rebind_connection(existing, connection_id)
                await self._commit(room)
                logger.info("%s reconnected to room %s", existing.display_name, room_code)
                return JoinOutcome(room=room, player=existing, reconnected=True)

            if not is_waiting(room):
                raise GameAlreadyStarted()

            # at-least-once delivery of join_room from the same connection
            same_conn = room.find_by_connection(connection_id)
            if same_conn is not None:
                return JoinOutcome(room=room, player=same_conn, reconnected=False)

            if name_taken(room.players, display_name):
                raise NameTaken(display_name)

            player = self._new_player(connection_id, display_name, identity_id)
            room.players.append(player)
            await self._commit(room)
            logger.info("%s joined room %s (%d players)", display_name, room_code, len(room.players))
            return JoinOutcome(room=room, player=player, reconnected=False)

    async def post_message(
        self,
        room_code: str,
        connection_id: str,
        text: str,
        display_name: str = "",
    ) -> Optional[ChatMessage]:
        async with self.serialized(room_code):
            room = await self.repo.find_room(room_code)
            if room is None:
                return None

            author = room.find_by_connection(connection_id)
            msg = ChatMessage(
                author_connection_id=connection_id,
                author_display_name=author.display_name if author else (display_name or "anonymous"),
                text=text,
                sent_at=self._clock(),
            )
            room.messages.append(msg)
            await self._commit(room)
            return msg

    async def start_game(self, room_code: str) -> RoomState:
        async with self.serialized(room_code):
            room = await self._load(room_code)
            if not is_waiting(room):
                raise GameAlreadyStarted("Game has already started")

            pair = assign_roles(room.players, self.catalog, self.rng, min_players=self.min_players)
            transition(room, RoomStatus.PLAYING)
            room.civilian_word = pair.civilian
            room.undercover_word = pair.undercover
            room.current_round = 1
            await self._commit(room)
            logger.info("room %s started with %d players", room_code, len(room.players))
            return room

    async def cast_vote(
        self,
        room_code: str,
        voter_connection_id: str,
        target_connection_id: str,
    ) -> Optional[RoomState]:
        async with self.serialized(room_code):
            room = await self.repo.find_room(room_code)
            if room is None:
                return None
            if not record_vote(room, voter_connection_id, target_connection_id):
                return None
            return await self._commit(room)

    async def end_round(self, room_code: str) -> RoundOutcome:
        async with self.serialized(room_code):
            room = await self._load(room_code)
            if not is_playing(room):
                raise GameNotInProgress()

            eliminated = resolve_round(room.players)
            room.current_round += 1

            winner = evaluate_winner(room.players)
            if winner != Winner.NONE:
                transition(room, RoomStatus.FINISHED)
                room.winner = winner

            await self._commit(room)
            if eliminated is not None:
                logger.info("room %s round %d: %s eliminated", room_code, room.current_round - 1, eliminated.display_name)
            if room.status == RoomStatus.FINISHED:
                logger.info("room %s finished, winner=%s", room_code, room.winner.value)
            return RoundOutcome(room=room, eliminated=eliminated)

    async def handle_disconnect(self, connection_id: str) -> List[DisconnectOutcome]:
        outcomes: List[DisconnectOutcome] = []
        for candidate in await self.repo.find_rooms_with_connection(connection_id):
            # rooms are cleaned up independently of each other
            try:
                outcome = await self._disconnect_from(candidate.room_code, connection_id)
            except GameError as exc:
                logger.warning("disconnect of %s from room %s failed: %s", connection_id, candidate.room_code, exc)
                continue
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    async def _disconnect_from(self, room_code: str, connection_id: str) -> Optional[DisconnectOutcome]:
        async with self.serialized(room_code):
            # reload: the scan result may be stale by now
            room = await self.repo.find_room(room_code)
            if room is None:
                return None
            player = room.find_by_connection(connection_id)
            if player is None:
                return None

            if classify_disconnect(room, player) == DisconnectAction.REMOVE:
                remove_player(room, connection_id)
                logger.info("removed guest %s from room %s", player.display_name, room_code)
                if not room.players:
                    await self.repo.delete_room(room_code)
                    logger.info("room %s deleted (empty)", room_code)
                    return DisconnectOutcome(room_code, player, removed=True, room=None, can_reconnect=False)
                await self._commit(room)
                return DisconnectOutcome(room_code, player, removed=True, room=room, can_reconnect=False)

            player.connected = False
            await self._commit(room)
            logger.info(
                "%s disconnected from room %s (can reconnect: %s)",
                player.display_name, room_code, can_reconnect(player),
            )
            return DisconnectOutcome(room_code, player, removed=False, room=room, can_reconnect=can_reconnect(player))

    # ----------------------------
    # Reads / admin
    # ----------------------------
    async def snapshot(self, room_code: str) -> RoomState:
        return await self._load(room_code)

    async def get_room(self, room_code: str) -> Optional[RoomState]:
        return await self.repo.find_room(room_code)

    async def list_rooms(self, limit: int = 10) -> List[RoomState]:
        return await self.repo.list_rooms(limit)

    async def close_room(self, room_code: str) -> bool:
        async with self.serialized(room_code):
            deleted = await self.repo.delete_room(room_code)
        if deleted:
            logger.info("room %s closed", room_code)
        return deleted
