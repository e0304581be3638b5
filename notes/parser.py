# notes/parser.py
import re
from typing import List, Optional

from notes.registry import KeyRegistry

# 以空白或逗號（可連續）分隔
SPLIT_RE = re.compile(r"[\s,]+")


class NoteParser:
    """Pulls a playable note sequence out of free text ("D2 D2, D3 A2")."""
    def __init__(self, registry: KeyRegistry):
        self.registry = registry

    def extract(self, raw_text: Optional[str]) -> List[str]:
        if not raw_text:
            return []
        out: List[str] = []
        for tok in SPLIT_RE.split(raw_text.lower()):
            note = self.registry.get(tok)
            if note is not None:
                out.append(note.name)
        return out

    def is_playable(self, raw_text: Optional[str]) -> bool:
        return bool(self.extract(raw_text))
