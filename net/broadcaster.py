# net/broadcaster.py
import json, logging, uuid
from typing import Any, Mapping, Optional

from notes.model import Origin
from notes.registry import KeyRegistry

KEY_PRESS = "key-press"


def encode_key_press(note_id: str) -> dict:
    return {"type": KEY_PRESS, "keyName": note_id}


def _as_mapping(msg: Any) -> Optional[Mapping]:
    if isinstance(msg, (bytes, bytearray)):
        try:
            msg = msg.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(msg, str):
        try:
            msg = json.loads(msg)
        except ValueError:
            return None
    return msg if isinstance(msg, Mapping) else None


def decode_key_press(msg: Any) -> Optional[str]:
    """keyName of a key-press message, or None if the message is not one.

    Accepts a dict or its JSON text; extra fields are ignored.
    """
    msg = _as_mapping(msg)
    if msg is None or msg.get("type") != KEY_PRESS:
        return None
    name = msg.get("keyName")
    return name if isinstance(name, str) else None


class EventBroadcaster:
    """
    Local press -> room; room -> remote press.
    Remote presses are played only: never re-sent, never shown to the detector.
    """
    def __init__(self, room, engine, registry: KeyRegistry):
        self.room = room
        self.engine = engine
        self.registry = registry
        if room is not None:
            room.subscribe(self.on_network_message)

    def publish_local_press(self, note_id: str) -> bool:
        if self.room is None:
            return False
        try:
            self.room.send(encode_key_press(note_id))
            return True
        except Exception:
            logging.warning("Broadcast of %s failed", note_id, exc_info=True)
            return False

    def on_network_message(self, msg: Any) -> bool:
        name = decode_key_press(msg)
        if name is None:
            logging.debug("Ignoring network message: %r", msg)
            return False
        note = self.registry.get(name)
        if note is None:
            logging.debug("Ignoring key-press for unknown key %r", name)
            return False
        return self.engine.press(note.name, origin=Origin.REMOTE)


COMMENT = "comment"


def encode_comment(comment) -> dict:
    return {"type": COMMENT, "id": comment.id, "author": comment.author, "content": comment.content}


def decode_comment(msg: Any) -> Optional[dict]:
    msg = _as_mapping(msg)
    if msg is None or msg.get("type") != COMMENT:
        return None
    content, cid = msg.get("content"), msg.get("id")
    if not isinstance(content, str) or not isinstance(cid, str) or not content.strip():
        return None
    author = msg.get("author")
    return {"id": cid, "author": author if isinstance(author, str) and author else "anonymous",
            "content": content}


class CommentRelay:
    """Posted comments go to the top of the local board and out to the room;
    comments from the room are prepended the same way (duplicates by id are dropped)."""
    def __init__(self, room, board, author: str = "anonymous"):
        self.room = room
        self.board = board
        self.author = author
        if room is not None:
            room.subscribe(self.on_network_message)

    def post(self, content: str):
        content = (content or "").strip()
        if not content:
            return None
        c = self.board.add(content, author=self.author, comment_id=uuid.uuid4().hex, prepend=True)
        if c is not None and self.room is not None:
            try:
                self.room.send(encode_comment(c))
            except Exception:
                logging.warning("Comment broadcast failed", exc_info=True)
        return c

    def on_network_message(self, msg: Any):
        data = decode_comment(msg)
        if data is None:
            return None
        return self.board.add(data["content"], author=data["author"], comment_id=data["id"], prepend=True)
