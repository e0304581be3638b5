# render/layout.py
from dataclasses import dataclass
from typing import Dict, List, Optional

from notes.registry import KeyRegistry

BLACK_W_RATIO = 0.6
BLACK_H_RATIO = 0.62


@dataclass(frozen=True)
class KeyRect:
    name: str
    x: float
    y: float
    w: float
    h: float
    is_black: bool

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.w and self.y <= py < self.y + self.h


class KeyboardLayout:
    """Key rectangles for a flat keyboard; also does the pointer picking."""
    def __init__(self, registry: KeyRegistry, x0: float, y0: float, width: float, height: float):
        self.registry = registry
        self.x0, self.y0, self.width, self.height = x0, y0, width, height
        self.whites: List[KeyRect] = []
        self.blacks: List[KeyRect] = []
        self.by_name: Dict[str, KeyRect] = {}
        self._build()

    def _build(self):
        white_w = self.width / max(1, self.registry.white_count)
        bw, bh = white_w * BLACK_W_RATIO, self.height * BLACK_H_RATIO
        x = self.x0
        for note in self.registry.all_notes():
            if note.is_black:
                # 黑鍵跨在前一個白鍵的右緣
                r = KeyRect(note.name, x - bw / 2, self.y0, bw, bh, True)
                self.blacks.append(r)
            else:
                r = KeyRect(note.name, x, self.y0, white_w, self.height, False)
                self.whites.append(r)
                x += white_w
            self.by_name[note.name] = r

    def key_at(self, px: float, py: float) -> Optional[str]:
        # 黑鍵疊在白鍵上面，先找黑鍵
        for r in self.blacks:
            if r.contains(px, py):
                return r.name
        for r in self.whites:
            if r.contains(px, py):
                return r.name
        return None

    def rect_of(self, note_id: str) -> Optional[KeyRect]:
        note = self.registry.get(note_id)
        return self.by_name.get(note.name) if note else None
