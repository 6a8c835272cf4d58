import random

import pytest

from undercover.domain.chat.handlers import handle_send_message
from undercover.domain.common.types import Role
from undercover.domain.game.handlers import handle_end_round, handle_start_game, handle_vote
from undercover.domain.lifecycle.handlers import handle_disconnect, handle_join_room, handle_snapshot
from undercover.domain.session.manager import RoomSessionManager
from undercover.store.memory_repo import MemoryRepo
from undercover.transport.protocols import (
    InEndRound,
    InJoinRoom,
    InSendMessage,
    InSnapshot,
    InStartGame,
    InVote,
)


class FakeWSManager:
    def __init__(self):
        self.joined = []

    async def join(self, conn_id, room_code):
        self.joined.append((conn_id, room_code))


class FakeState:
    def __init__(self, sessions, wsman):
        self.sessions = sessions
        self.wsman = wsman


class FakeApp:
    def __init__(self):
        self.state = FakeState(RoomSessionManager(MemoryRepo(), rng=random.Random(3)), FakeWSManager())


async def _join(app, conn_id, name, create=False, identity=None):
    msg = InJoinRoom(room_code="ABC", display_name=name, allow_create=create, identity_id=identity)
    return await handle_join_room(app=app, conn_id=conn_id, msg=msg)


async def _lobby(app, n=3):
    await _join(app, "c0", "P0", create=True)
    for i in range(1, n):
        await _join(app, f"c{i}", f"P{i}")


@pytest.mark.asyncio
async def test_join_success_and_room_update():
    app = FakeApp()
    to_sender, to_room = await _join(app, "c0", "Alice", create=True)

    assert [e.type for e in to_sender] == ["join_success"]
    assert to_sender[0].reconnected is False
    assert [e.type for e in to_room] == ["room_update"]
    assert to_room[0].room["players"][0]["display_name"] == "Alice"
    assert app.state.wsman.joined == [("c0", "ABC")]


@pytest.mark.asyncio
async def test_join_errors_go_to_sender_only():
    app = FakeApp()
    to_sender, to_room = await _join(app, "c0", "Alice")
    assert to_sender[0].type == "error"
    assert to_sender[0].code == "ROOM_NOT_FOUND"
    assert to_room == []
    assert app.state.wsman.joined == []

    await _join(app, "c0", "Alice", create=True)
    to_sender, to_room = await _join(app, "c1", "ALICE")
    assert to_sender[0].code == "NAME_TAKEN"
    assert to_room == []


@pytest.mark.asyncio
async def test_start_game_broadcasts_roles():
    app = FakeApp()
    await _lobby(app)

    to_sender, to_room = await handle_start_game(app=app, conn_id="c0", msg=InStartGame(room_code="ABC"))

    assert to_sender == []
    assert to_room[0].type == "game_started"
    assert to_room[0].room["status"] == "playing"
    assert all(p["role"] != "unassigned" for p in to_room[0].room["players"])


@pytest.mark.asyncio
async def test_start_game_with_too_few_players():
    app = FakeApp()
    await _lobby(app, n=2)
    to_sender, to_room = await handle_start_game(app=app, conn_id="c0", msg=InStartGame(room_code="ABC"))
    assert to_sender[0].code == "INSUFFICIENT_PLAYERS"
    assert to_room == []


@pytest.mark.asyncio
async def test_vote_and_duplicate_vote():
    app = FakeApp()
    await _lobby(app)
    await handle_start_game(app=app, conn_id="c0", msg=InStartGame(room_code="ABC"))

    vote = InVote(room_code="ABC", target_connection_id="c1")
    _, to_room = await handle_vote(app=app, conn_id="c0", msg=vote)
    assert to_room[0].type == "vote_update"

    assert await handle_vote(app=app, conn_id="c0", msg=vote) == ([], [])


@pytest.mark.asyncio
async def test_end_round_reports_eliminated_player():
    app = FakeApp()
    await _lobby(app)
    room = (await handle_start_game(app=app, conn_id="c0", msg=InStartGame(room_code="ABC")))[1][0].room
    undercover = next(p["connection_id"] for p in room["players"] if p["role"] == Role.UNDERCOVER.value)
    for p in room["players"]:
        if p["connection_id"] != undercover:
            vote = InVote(room_code="ABC", target_connection_id=undercover)
            await handle_vote(app=app, conn_id=p["connection_id"], msg=vote)

    _, to_room = await handle_end_round(app=app, conn_id="c0", msg=InEndRound(room_code="ABC"))

    ev = to_room[0]
    assert ev.type == "round_ended"
    assert ev.eliminated_player["connection_id"] == undercover
    assert ev.room["status"] == "finished"
    assert ev.room["winner"] == "civilians"


@pytest.mark.asyncio
async def test_end_round_before_start():
    app = FakeApp()
    await _lobby(app)
    to_sender, _ = await handle_end_round(app=app, conn_id="c0", msg=InEndRound(room_code="ABC"))
    assert to_sender[0].code == "GAME_NOT_IN_PROGRESS"


@pytest.mark.asyncio
async def test_chat_message_broadcast():
    app = FakeApp()
    await _lobby(app, n=1)
    msg = InSendMessage(room_code="ABC", text="hi")
    _, to_room = await handle_send_message(app=app, conn_id="c0", msg=msg)
    assert to_room[0].type == "new_message"
    assert to_room[0].message["author_display_name"] == "P0"

    missing = InSendMessage(room_code="NOPE", text="hi")
    assert await handle_send_message(app=app, conn_id="c0", msg=missing) == ([], [])


@pytest.mark.asyncio
async def test_snapshot_goes_to_sender():
    app = FakeApp()
    await _lobby(app, n=1)
    to_sender, to_room = await handle_snapshot(app=app, conn_id="c0", msg=InSnapshot(room_code="ABC"))
    assert to_sender[0].type == "room_update"
    assert to_room == []

    to_sender, _ = await handle_snapshot(app=app, conn_id="c0", msg=InSnapshot(room_code="NOPE"))
    assert to_sender[0].code == "ROOM_NOT_FOUND"


@pytest.mark.asyncio
async def test_disconnect_events():
    app = FakeApp()
    await _join(app, "c0", "Host", create=True, identity="u0")
    await _join(app, "c1", "Guest")

    out = await handle_disconnect(app=app, conn_id="c1")
    assert len(out) == 1
    code, events = out[0]
    assert code == "ABC"
    assert events[0].type == "room_update"
    assert [p["display_name"] for p in events[0].room["players"]] == ["Host"]

    out = await handle_disconnect(app=app, conn_id="c0")
    ev = out[0][1][0]
    assert ev.type == "player_disconnected"
    assert ev.can_reconnect is True

    assert await handle_disconnect(app=app, conn_id=None) == []
