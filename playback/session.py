# playback/session.py
import logging
from typing import Callable, Iterable, List, Optional

from config import AppConfig
from comments.board import Comment, CommentBoard
from net.broadcaster import CommentRelay, EventBroadcaster
from notes.model import Origin, PressEvent
from notes.parser import NoteParser
from notes.registry import KeyRegistry
from playback.engine import PlaybackEngine
from secret.detector import EasterEggDetector
from timeline.scheduler import Scheduler


class PianoSession:
    """
    Owns the keyboard, the timers and the press pipeline of one participant.

    local input  -> press_local -> engine + room + detector
    room message -> broadcaster -> engine (remote)
    text         -> parser      -> engine.play_sequence
    """
    def __init__(self, cfg: AppConfig, room=None, audio=None,
                 scheduler: Optional[Scheduler] = None,
                 on_secret: Optional[Callable[[], None]] = None):
        self.cfg = cfg
        self.registry = KeyRegistry(cfg.keyboard)
        self.scheduler = scheduler or Scheduler()
        self.parser = NoteParser(self.registry)
        self.engine = PlaybackEngine(self.registry, self.scheduler, audio, cfg.playback)
        self.room = room
        self.broadcaster = EventBroadcaster(room, self.engine, self.registry)
        self.detector = EasterEggDetector(cfg.secret.sequence, on_match=on_secret)
        self.board = CommentBoard(self.parser)
        self.comments = CommentRelay(room, self.board, cfg.net.username)

    def press_local(self, note_id: str) -> bool:
        note = self.registry.get(note_id)
        if note is None:
            logging.debug("press_local: unknown note %r", note_id)
            return False
        self.engine.press(note.name, origin=Origin.LOCAL)
        self.broadcaster.publish_local_press(note.name)
        self.detector.feed(PressEvent(note.name, Origin.LOCAL, note))
        return True

    def play_notes(self, note_ids: Iterable[str]) -> int:
        return self.engine.play_sequence(note_ids)

    def play_text(self, text: str) -> List[str]:
        notes = self.parser.extract(text)
        if notes:
            self.engine.play_sequence(notes)
        return notes

    def post_comment(self, text: str) -> Optional[Comment]:
        """Live comment: top of the local board, then out to the room."""
        return self.comments.post(text)

    def pump(self, dt: float = 0.0) -> None:
        """One main-loop tick: inbound messages first, then due timers."""
        if self.room is not None:
            self.room.poll()
        self.scheduler.step(dt)

    def close(self):
        if self.room is not None:
            self.room.close()
        audio = self.engine.audio
        if audio is not None and hasattr(audio, "close"):
            audio.close()
