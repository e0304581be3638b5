# secret/detector.py
import logging
from collections import deque
from typing import Callable, Optional, Sequence, Tuple

from notes.model import PressEvent

DEFAULT_SECRET: Tuple[str, ...] = ("D2", "D2", "D3", "A2")


class EasterEggDetector:
    """Sliding window over the last N local presses; exact match fires on_match once."""
    def __init__(self, target: Sequence[str] = DEFAULT_SECRET,
                 on_match: Optional[Callable[[], None]] = None):
        if not target:
            raise ValueError("secret sequence must not be empty")
        # 與 registry 的標準寫法一致（"c#4" -> "C#4"）
        self.target: Tuple[str, ...] = tuple(str(n).strip().upper() for n in target)
        self.on_match = on_match
        self.fired = False
        self._window = deque(maxlen=len(self.target))

    @property
    def window(self) -> Tuple[str, ...]:
        return tuple(self._window)

    def feed(self, event: PressEvent) -> bool:
        if not event.is_local:
            return False
        self._window.append(event.note_id)
        if self.fired or tuple(self._window) != self.target:
            return False
        self.fired = True
        logging.info("Secret sequence matched")
        if self.on_match is not None:
            self.on_match()
        return True

    def reset(self):
        self._window.clear()
