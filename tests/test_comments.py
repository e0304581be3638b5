from comments.board import CommentBoard
from notes.parser import NoteParser
from notes.registry import KeyRegistry


def board(limit=20):
    return CommentBoard(NoteParser(KeyRegistry()), limit=limit)

def test_playable_flag():
    b = board()
    tune = b.add("try this: D2 D2 D3 A2")
    chat = b.add("nice piano!")
    assert tune.playable and tune.notes == ["D2", "D2", "D3", "A2"]
    assert not chat.playable
    assert b.playable() == [tune]

def test_newest_first_and_dedupe():
    b = board()
    b.add("first", comment_id="1")
    b.add("second", comment_id="2")
    assert b.add("again", comment_id="1") is None
    assert [c.id for c in b.items] == ["2", "1"]
    assert b.get("1").content == "first"

def test_limit_drops_oldest():
    b = board(limit=2)
    for i in range(3):
        b.add(f"c{i}", comment_id=str(i))
    assert [c.id for c in b.items] == ["2", "1"]
    assert b.get("0") is None

def test_load_text_blocks_and_authors():
    b = board()
    n = b.load_text("@ana: C4 E4 G4\n\nhello there\n  \n@bo:   a2,a3\nsecond line\n")
    assert n == 3
    assert [c.author for c in b.items] == ["ana", "anonymous", "bo"]
    assert b.items[0].notes == ["C4", "E4", "G4"]
    assert b.items[2].notes == ["A2", "A3"]
    assert not b.items[1].playable

def test_load_file(tmp_path):
    p = tmp_path / "comments.txt"
    p.write_text("C4 C4 G4 G4\n\nbye", encoding="utf-8")
    b = board()
    assert b.load_file(str(p)) == 2
    assert len(b.playable()) == 1


def test_post_goes_to_top_and_reaches_peer(hub):
    from config import AppConfig, NetConfig
    from playback.session import PianoSession
    alice = PianoSession(AppConfig(net=NetConfig(username="alice")), room=hub.join())
    bob = PianoSession(AppConfig(), room=hub.join())
    bob.board.add("older comment")

    c = alice.post_comment("  listen: C4 E4 G4  ")
    assert c is not None and c.author == "alice"
    assert alice.board.items[0] is c
    assert c.content == "listen: C4 E4 G4" and c.playable
    assert [m["type"] for m in alice.room.sent] == ["comment"]

    bob.pump()
    top = bob.board.items[0]
    assert (top.id, top.author, top.content) == (c.id, "alice", c.content)
    assert top.notes == ["C4", "E4", "G4"]
    assert bob.board.items[1].content == "older comment"
    # 留言不會按下任何鍵
    assert bob.engine.pressed_notes() == []
    assert bob.detector.window == ()

def test_blank_post_is_dropped(make_session):
    alice = make_session()
    assert alice.post_comment("   ") is None
    assert alice.post_comment("") is None
    assert alice.board.items == []
    assert alice.room.sent == []

def test_post_offline_stays_local():
    from config import AppConfig
    from playback.session import PianoSession
    s = PianoSession(AppConfig())
    c = s.post_comment("D2 D2 D3 A2")
    assert s.board.playable() == [c]

def test_relayed_duplicate_and_malformed_comments_ignored(make_session):
    alice, bob = make_session(), make_session()
    c = alice.post_comment("hi")
    alice.room.send({"type": "comment", "id": c.id, "author": "x", "content": "again"})
    alice.room.send({"type": "comment", "id": "z", "content": "   "})
    alice.room.send({"type": "comment", "content": "no id"})
    alice.room.send('{"type": "comment", "id": "j1", "author": "", "content": "from json"}')
    bob.pump()
    assert [(x.content, x.author) for x in bob.board.items] == [("from json", "anonymous"), ("hi", "anonymous")]
