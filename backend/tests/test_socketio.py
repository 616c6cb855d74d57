from conftest import TEST_TEXT


def _named(received, name):
    return [pkt["args"] for pkt in received if pkt["name"] == name]


def test_join_with_positional_args(sio_factory):
    alice = sio_factory()
    alice.get_received()
    alice.emit("join-room", "abc", "alice")

    [[snapshot]] = _named(alice.get_received(), "room-joined")
    assert snapshot["id"] == "abc"
    assert snapshot["phase"] == "setup"
    assert [p["username"] for p in snapshot["participants"]] == ["alice"]
    assert snapshot["participants"][0]["isHost"] is True


def test_second_join_notifies_others_only(sio_factory):
    alice, bob = sio_factory(), sio_factory()
    alice.emit("join-room", "abc", "alice")
    alice.get_received()
    bob.emit("join-room", {"roomId": "abc", "username": "bob"})

    [[joined]] = _named(alice.get_received(), "participant-joined")
    assert joined["username"] == "bob"
    assert joined["isHost"] is False

    bob_events = bob.get_received()
    assert _named(bob_events, "participant-joined") == []
    [[snapshot]] = _named(bob_events, "room-joined")
    assert [p["username"] for p in snapshot["participants"]] == ["alice", "bob"]


def test_full_round_over_socketio(sio_factory, scheduler):
    alice, bob = sio_factory(), sio_factory()
    alice.emit("join-room", "abc", "alice")
    bob.emit("join-room", "abc", "bob")
    alice.emit("configure-test", {"timerDuration": 15})
    alice.get_received()
    bob.get_received()

    alice.emit("ready-toggle")
    bob.emit("ready-toggle")
    events = bob.get_received()
    assert [args[1] for args in _named(events, "ready-state-changed")] == [True, True]
    assert _named(events, "countdown-start") == [[5]]

    scheduler.advance(5)
    events = alice.get_received()
    assert _named(events, "countdown-update") == [[4], [3], [2], [1]]
    assert _named(events, "test-start") == [[TEST_TEXT, 15]]

    alice.emit("submit-results", {"wpm": 72, "rawWpm": 80, "accuracy": 96, "charactersTyped": 360, "completionPercentage": 40})
    bob.emit("submit-results", {"wpm": 88, "rawWpm": 90, "accuracy": 98, "charactersTyped": 440, "completionPercentage": 50})

    events = alice.get_received()
    names = [pkt["name"] for pkt in events]
    assert names.index("room-state-updated") < names.index("final-rankings")
    [[state]] = _named(events, "room-state-updated")
    assert state["phase"] == "results"
    [[rankings]] = _named(events, "final-rankings")
    assert [(r["username"], r["rank"]) for r in rankings] == [("bob", 1), ("alice", 2)]
    [[state]] = _named(bob.get_received(), "room-state-updated")
    assert state["phase"] == "results"

    scheduler.advance(10)
    [[state]] = _named(bob.get_received(), "room-state-updated")
    assert state["phase"] == "setup"
    assert all(p["finalResults"] is None and not p["isReady"] for p in state["participants"])


def test_errors_go_to_sender_only(sio_factory):
    alice, bob = sio_factory(), sio_factory()
    alice.emit("join-room", "abc", "alice")
    bob.emit("join-room", "abc", "bob")
    alice.get_received()
    bob.get_received()

    bob.emit("configure-test", {"timerDuration": 60})
    [[err]] = _named(bob.get_received(), "error")
    assert err["error"] == "not_authorized"
    assert _named(alice.get_received(), "error") == []

    alice.emit("configure-test", {"timerDuration": 45})
    [[err]] = _named(alice.get_received(), "error")
    assert err["error"] == "invalid_config"


def test_host_disconnect_hands_over(sio_factory):
    alice, bob = sio_factory(), sio_factory()
    alice.emit("join-room", "abc", "alice")
    bob.emit("join-room", "abc", "bob")
    [[snapshot]] = _named(bob.get_received(), "room-joined")
    bob_id = snapshot["participants"][1]["id"]
    alice_id = snapshot["participants"][0]["id"]

    alice.disconnect()
    events = bob.get_received()
    assert _named(events, "participant-left") == [[alice_id]]
    assert _named(events, "host-changed") == [[bob_id]]


def test_leave_room_stops_broadcasts(sio_factory):
    alice, bob = sio_factory(), sio_factory()
    alice.emit("join-room", "abc", "alice")
    bob.emit("join-room", "abc", "bob")
    bob.emit("leave-room")
    bob.get_received()

    alice.emit("configure-test", {"timerDuration": 60})
    assert _named(alice.get_received(), "config-updated") == [[{"timerDuration": 60, "testText": ""}]]
    assert _named(bob.get_received(), "config-updated") == []
