# comments/board.py
import itertools, logging, re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from notes.parser import NoteParser

BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")
AUTHOR_RE = re.compile(r"^@(\S+)\s*:\s*")


@dataclass
class Comment:
    id: str
    author: str
    content: str
    notes: List[str] = field(default_factory=list)

    @property
    def playable(self) -> bool:
        return bool(self.notes)


class CommentBoard:
    """Comments shown next to the piano; the ones that contain notes are playable."""
    def __init__(self, parser: NoteParser, limit: int = 20):
        self.parser = parser
        self.limit = limit
        self.items: List[Comment] = []   # newest first
        self._by_id: Dict[str, Comment] = {}
        self._ids = itertools.count(1)

    def add(self, content: str, author: str = "anonymous", comment_id: Optional[str] = None,
            prepend: bool = True) -> Optional[Comment]:
        cid = comment_id or f"local-{next(self._ids)}"
        if cid in self._by_id:
            return None
        c = Comment(id=cid, author=author, content=content or "", notes=self.parser.extract(content))
        self._by_id[cid] = c
        if prepend:
            self.items.insert(0, c)
        else:
            self.items.append(c)
        # 只保留最新的 limit 則
        while len(self.items) > self.limit:
            old = self.items.pop()
            self._by_id.pop(old.id, None)
        return c

    def load_text(self, text: str) -> int:
        """Blocks separated by blank lines; an optional "@name:" prefix sets the author.

        The file is read newest-first, same order the board shows.
        """
        n = 0
        for block in BLOCK_SPLIT_RE.split(text.strip()):
            block = block.strip()
            if not block:
                continue
            author = "anonymous"
            m = AUTHOR_RE.match(block)
            if m:
                author, block = m.group(1), block[m.end():]
            if self.add(block, author=author, prepend=False) is not None:
                n += 1
        return n

    def load_file(self, path: str) -> int:
        with open(path, "r", encoding="utf-8") as f:
            n = self.load_text(f.read())
        logging.info("Loaded %d comments from %s (%d playable)", n, path, len(self.playable()))
        return n

    def get(self, comment_id: str) -> Optional[Comment]:
        return self._by_id.get(comment_id)

    def playable(self) -> List[Comment]:
        return [c for c in self.items if c.playable]
