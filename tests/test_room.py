from net.room import LocalHub


def test_fanout_excludes_sender():
    hub = LocalHub()
    a, b, c = hub.join(), hub.join(), hub.join()
    got = {"a": [], "b": [], "c": []}
    a.subscribe(got["a"].append); b.subscribe(got["b"].append); c.subscribe(got["c"].append)
    a.send({"type": "key-press", "keyName": "C4"})
    for r in (a, b, c):
        r.poll()
    assert got["a"] == []
    assert got["b"] == got["c"] == [{"type": "key-press", "keyName": "C4"}]

def test_messages_wait_for_poll():
    hub = LocalHub()
    a, b = hub.join(), hub.join()
    seen = []
    b.subscribe(seen.append)
    a.send({"n": 1}); a.send({"n": 2})
    assert seen == [] and b.backlog == 2
    assert b.poll(limit=1) == 1
    assert seen == [{"n": 1}]
    b.poll()
    assert seen == [{"n": 1}, {"n": 2}]

def test_receivers_get_copies():
    hub = LocalHub()
    a, b = hub.join(), hub.join()
    seen = []
    b.subscribe(seen.append)
    msg = {"type": "key-press", "keyName": "C4"}
    a.send(msg)
    b.poll()
    seen[0]["keyName"] = "D4"
    assert msg["keyName"] == "C4"

def test_failing_listener_does_not_block_others():
    hub = LocalHub()
    a, b = hub.join(), hub.join()
    seen = []
    def boom(_):
        raise RuntimeError("x")
    b.subscribe(boom); b.subscribe(seen.append)
    a.send({"n": 1})
    b.poll()
    assert seen == [{"n": 1}]

def test_closed_room_leaves_hub():
    hub = LocalHub()
    a, b = hub.join(), hub.join()
    b.close()
    a.send({"n": 1})
    assert b.backlog == 0
    assert hub.members == [a]
