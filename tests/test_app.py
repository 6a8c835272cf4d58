from fastapi.testclient import TestClient

from undercover.main import create_app
from undercover.settings import Settings


def _client():
    return TestClient(create_app(Settings(STORE_BACKEND="memory", LOG_LEVEL="WARNING")))


def test_health():
    with _client() as client:
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json() == {"ok": True, "store": "memory"}


def test_join_over_websocket_and_inspect_room():
    with _client() as client:
        with client.websocket_connect("/ws") as ws:
            hello = ws.receive_json()
            assert hello["type"] == "hello"

            ws.send_json({"type": "join_room", "room_code": "ABC", "display_name": "Alice", "allow_create": True})
            update = ws.receive_json()
            joined = ws.receive_json()
            assert update["type"] == "room_update"
            assert joined["type"] == "join_success"
            assert joined["room"]["players"][0]["connection_id"] == hello["connection_id"]

            res = client.get("/rooms/ABC")
            assert res.status_code == 200
            assert res.json()["players"][0]["display_name"] == "Alice"

            listing = client.get("/rooms").json()["rooms"]
            assert [r["room_code"] for r in listing] == ["ABC"]
            assert listing[0]["players"] == 1
            assert listing[0]["subscribers"] == 1


def test_websocket_errors():
    with _client() as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_json({"type": "join_room", "room_code": "NOPE", "display_name": "Bob"})
            err = ws.receive_json()
            assert err == {
                "type": "error",
                "code": "ROOM_NOT_FOUND",
                "message": "Room not found. Please check the room code.",
            }

            ws.send_json({"type": "bogus"})
            assert ws.receive_json()["code"] == "BAD_MESSAGE"

            ws.send_text("not json")
            assert ws.receive_json()["code"] == "BAD_MESSAGE"


def test_two_players_see_each_other():
    with _client() as client:
        with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
            a.receive_json()
            b.receive_json()

            a.send_json({"type": "join_room", "room_code": "ABC", "display_name": "A", "allow_create": True})
            a.receive_json()
            a.receive_json()

            b.send_json({"type": "join_room", "room_code": "ABC", "display_name": "B"})
            assert b.receive_json()["type"] == "room_update"
            assert b.receive_json()["type"] == "join_success"
            seen_by_a = a.receive_json()
            assert seen_by_a["type"] == "room_update"
            assert [p["display_name"] for p in seen_by_a["room"]["players"]] == ["A", "B"]

            a.send_json({"type": "send_message", "room_code": "ABC", "text": "hi"})
            msg = b.receive_json()
            assert msg["type"] == "new_message"
            assert msg["message"]["text"] == "hi"


def test_missing_room_routes():
    with _client() as client:
        assert client.get("/rooms/NOPE").status_code == 404
        assert client.delete("/rooms/NOPE").status_code == 404


def test_close_room_notifies_members():
    with _client() as client:
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "join_room", "room_code": "ABC", "display_name": "A", "allow_create": True})
            ws.receive_json()
            ws.receive_json()

            assert client.delete("/rooms/ABC").status_code == 200
            notice = ws.receive_json()
            assert notice["code"] == "ROOM_CLOSED"
            assert client.get("/rooms/ABC").status_code == 404
