import random

import pytest

from shadowsignal.server import create_app

from conftest import FakeHints, ManualScheduler


@pytest.fixture
def server():
    scheduler = ManualScheduler()
    app, socketio = create_app(async_mode="threading", hints=FakeHints(), scheduler=scheduler, rng=random.Random(11))
    app.config["TESTING"] = True
    return app, socketio, scheduler


def connect(server):
    app, socketio, _ = server
    return socketio.test_client(app)


def events(client, name):
    return [msg["args"][0] for msg in client.get_received() if msg["name"] == name]


def test_create_join_start_flow(server):
    app, socketio, scheduler = server
    alice, bob, cara = connect(server), connect(server), connect(server)

    ack = alice.emit("CREATE_ROOM", {"hostName": "Alice", "guestId": "g-alice", "mode": "SPY"}, callback=True)
    assert ack["ok"]
    code = ack["roomCode"]

    assert bob.emit("JOIN_ROOM", {"roomCode": code.lower(), "name": "Bob", "guestId": "g-bob"}, callback=True)["ok"]
    assert cara.emit("JOIN_ROOM", {"roomCode": code, "name": "Cara", "guestId": "g-cara"}, callback=True)["ok"]

    received = alice.get_received()
    states = [m["args"][0] for m in received if m["name"] == "GAME_STATE_UPDATE"]
    joined = [m["args"][0] for m in received if m["name"] == "PLAYER_JOINED"]
    assert [p["name"] for p in states[-1]["players"]] == ["Alice", "Bob", "Cara"]
    assert joined == ["Bob", "Cara"]
    assert "sid" not in states[-1]["players"][0]

    assert alice.emit("START_GAME", {"roomCode": code}, callback=True)["ok"]
    state = events(bob, "GAME_STATE_UPDATE")[-1]
    assert state["phase"] == "ROLE_REVEAL"
    assert sorted(p["role"] for p in state["players"]) == ["AGENT", "AGENT", "SPY"]

    scheduler.run("_reveal_then_speak")
    state = events(cara, "GAME_STATE_UPDATE")[-1]
    assert state["phase"] == "SPEAKING"
    assert state["currentSpeakerId"] == "g-alice"
    assert state["clues"][0]["sender"] == "SHADOW_SIGNAL_AI"


def test_validation_errors_go_to_sender_only(server):
    alice, bob, cara = connect(server), connect(server), connect(server)
    code = alice.emit("CREATE_ROOM", {"hostName": "Alice", "guestId": "g-alice"}, callback=True)["roomCode"]
    bob.emit("JOIN_ROOM", {"roomCode": code, "name": "Bob", "guestId": "g-bob"}, callback=True)
    alice.get_received()
    bob.get_received()

    ack = bob.emit("START_GAME", {"roomCode": code}, callback=True)

    assert ack == {"ok": False, "error": "only_host"}
    assert events(bob, "ERROR") == [{"error": "only_host", "message": "Only the host can start the game."}]
    assert alice.get_received() == []

    ack = alice.emit("START_GAME", {"roomCode": code}, callback=True)
    assert ack == {"ok": False, "error": "not_enough_players"}
    assert events(cara, "ERROR") == []


def test_join_missing_room(server):
    client = connect(server)

    ack = client.emit("JOIN_ROOM", {"roomCode": "QQQQ", "name": "Bob", "guestId": "g-bob"}, callback=True)

    assert ack == {"ok": False, "error": "room_not_found"}
    assert events(client, "ERROR")[0]["error"] == "room_not_found"


def test_join_requires_code(server):
    client = connect(server)

    ack = client.emit("JOIN_ROOM", {"name": "Bob"}, callback=True)

    assert ack == {"ok": False, "error": "invalid_payload"}


def test_disconnect_migrates_host_and_broadcasts(server):
    app, socketio, _ = server
    alice, bob = connect(server), connect(server)
    code = alice.emit("CREATE_ROOM", {"hostName": "Alice", "guestId": "g-alice"}, callback=True)["roomCode"]
    bob.emit("JOIN_ROOM", {"roomCode": code, "name": "Bob", "guestId": "g-bob"}, callback=True)
    bob.get_received()

    alice.disconnect()

    state = events(bob, "GAME_STATE_UPDATE")[-1]
    assert [(p["name"], p["isHost"]) for p in state["players"]] == [("Bob", True)]

    bob.disconnect()
    assert app.extensions["shadowsignal"].store.get(code) is None


def test_http_room_lookup(server):
    app, socketio, _ = server
    http = app.test_client()

    assert http.get("/").status_code == 200
    assert http.get("/api/health").get_json() == {"ok": True, "rooms": 0}
    assert http.get("/api/rooms/ABCD").status_code == 404

    alice = connect(server)
    code = alice.emit("CREATE_ROOM", {"hostName": "Alice", "guestId": "g-alice"}, callback=True)["roomCode"]

    res = http.get(f"/api/rooms/{code.lower()}")
    assert res.status_code == 200
    assert res.get_json()["roomCode"] == code
    assert http.get("/api/health").get_json()["rooms"] == 1
