# notes/model.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

WHITE_LETTERS = frozenset("CDEFGAB")


class Origin(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    PLAYBACK = "playback"   # 留言、MIDI 自動播放


@dataclass(frozen=True)
class Note:
    letter: str     # C..B
    sharp: bool
    octave: int
    offset: int     # semitones from the reference note (C4 = 0)

    @property
    def name(self) -> str:
        return f"{self.letter}{'#' if self.sharp else ''}{self.octave}"

    @property
    def is_black(self) -> bool:
        return self.sharp or self.letter not in WHITE_LETTERS


@dataclass(frozen=True)
class PressEvent:
    note_id: str
    origin: Origin = Origin.LOCAL
    note: Optional[Note] = None

    @property
    def is_local(self) -> bool:
        return self.origin is Origin.LOCAL
