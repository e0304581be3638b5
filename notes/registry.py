# notes/registry.py
import re
from typing import Dict, Iterator, Optional, Tuple

from config import KeyboardConfig
from notes.model import Note

# 一個八度內的 12 個半音（只用升記號）
CHROMATIC: Tuple[Tuple[str, bool], ...] = (
    ("C", False), ("C", True), ("D", False), ("D", True), ("E", False), ("F", False),
    ("F", True), ("G", False), ("G", True), ("A", False), ("A", True), ("B", False),
)

NAME_RE = re.compile(r"([A-G])(#?)(\d)")


class NotFoundError(KeyError):
    """Raised when a note identifier is not on the keyboard."""


def _semitone_index(letter: str, sharp: bool, octave: int) -> int:
    return octave * 12 + CHROMATIC.index((letter, sharp))


class KeyRegistry:
    """
    The keyboard: one key per semitone from C{first_octave} up to C{last_octave}.
    Built once, read-only afterwards. Lookups are case-insensitive; names come
    back in canonical form ("C#4").
    """
    def __init__(self, cfg: Optional[KeyboardConfig] = None):
        self.cfg = cfg or KeyboardConfig()
        m = NAME_RE.fullmatch(self.cfg.reference_note.strip().upper())
        if not m:
            raise ValueError(f"Bad reference note: {self.cfg.reference_note!r}")
        ref = _semitone_index(m.group(1), bool(m.group(2)), int(m.group(3)))

        notes = []
        for octave in range(self.cfg.first_octave, self.cfg.last_octave + 1):
            for letter, sharp in CHROMATIC:
                # 最高八度只到 C
                if octave == self.cfg.last_octave and (letter, sharp) != ("C", False):
                    break
                idx = _semitone_index(letter, sharp, octave)
                notes.append(Note(letter=letter, sharp=sharp, octave=octave, offset=idx - ref))

        self._notes: Tuple[Note, ...] = tuple(notes)
        self._by_key: Dict[str, Note] = {n.name.lower(): n for n in self._notes}
        self._by_offset: Dict[int, Note] = {n.offset: n for n in self._notes}
        if 0 not in self._by_offset:
            raise ValueError(f"Reference note {self.cfg.reference_note!r} is outside the keyboard")

    # ---------- queries ----------
    def all_notes(self) -> Tuple[Note, ...]:
        return self._notes

    def get(self, note_id) -> Optional[Note]:
        if not isinstance(note_id, str):
            return None
        return self._by_key.get(note_id.strip().lower())

    def offset_of(self, note_id: str) -> int:
        note = self.get(note_id)
        if note is None:
            raise NotFoundError(note_id)
        return note.offset

    def canonical(self, note_id: str) -> str:
        note = self.get(note_id)
        if note is None:
            raise NotFoundError(note_id)
        return note.name

    def is_valid_name(self, text) -> bool:
        return self.get(text) is not None

    def note_for_offset(self, offset: int) -> Optional[Note]:
        return self._by_offset.get(int(offset))

    @property
    def white_count(self) -> int:
        return sum(1 for n in self._notes if not n.is_black)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self._notes)

    def __contains__(self, note_id) -> bool:
        return self.is_valid_name(note_id)
