# playback/engine.py
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from config import PlaybackConfig
from notes.model import Origin
from notes.registry import KeyRegistry
from timeline.scheduler import Scheduler


@dataclass
class KeyState:
    pressed: bool = False
    token: int = 0                  # 每次真正按下就 +1，放開時比對
    origin: Optional[Origin] = None


class PlaybackEngine:
    """
    The one place a key actually sounds and moves.

    press(): audio every time; the key goes down only if it is up, and comes
    back up dwell_ms after the press that put it down.
    play_sequence(): one slot per entry, step_ms apart, starting now;
    unknown entries keep their slot but stay silent.
    """
    def __init__(self, registry: KeyRegistry, scheduler: Scheduler, audio=None,
                 cfg: Optional[PlaybackConfig] = None):
        self.registry = registry
        self.scheduler = scheduler
        self.audio = audio
        self.cfg = cfg or PlaybackConfig()
        self._states: Dict[str, KeyState] = {n.name: KeyState() for n in registry.all_notes()}

    # ---------- single key ----------
    def press(self, note_id: str, origin: Origin = Origin.LOCAL) -> bool:
        note = self.registry.get(note_id)
        if note is None:
            logging.debug("press: unknown note %r (%s) ignored", note_id, getattr(origin, "value", origin))
            return False

        self._play_sound(note.offset)

        st = self._states[note.name]
        if st.pressed:
            return True
        st.pressed = True
        st.origin = origin
        st.token += 1
        self.scheduler.call_later(self.cfg.dwell_s, self._release, note.name, st.token)
        return True

    def _play_sound(self, semitones: int):
        if self.audio is None:
            return
        try:
            self.audio.play(semitones)
        except Exception:
            # 沒聲音就只剩畫面
            logging.warning("Audio playback failed (offset %d)", semitones, exc_info=True)

    def _release(self, name: str, token: int):
        st = self._states[name]
        if st.token != token:
            logging.debug("stale release for %s (token %d, current %d)", name, token, st.token)
            return
        st.pressed = False
        st.origin = None

    # ---------- sequence ----------
    def play_sequence(self, note_ids: Iterable[str]) -> int:
        # 每個項目都佔一格時間，不認識的音只是不發聲
        slots: List[tuple] = []
        for i, nid in enumerate(note_ids or ()):
            note = self.registry.get(nid)
            if note is None:
                logging.debug("play_sequence: slot %d has unknown note %r", i, nid)
                continue
            slots.append((i, note.name))
        for i, name in slots:
            self.scheduler.call_later(i * self.cfg.step_s, self.press, name, Origin.PLAYBACK)
        if slots:
            logging.info("Playing sequence of %d notes", len(slots))
        return len(slots)

    # ---------- queries (renderer) ----------
    def is_pressed(self, note_id: str) -> bool:
        note = self.registry.get(note_id)
        return bool(note and self._states[note.name].pressed)

    def origin_of(self, note_id: str) -> Optional[Origin]:
        note = self.registry.get(note_id)
        return self._states[note.name].origin if note else None

    def pressed_notes(self) -> List[str]:
        return [n.name for n in self.registry.all_notes() if self._states[n.name].pressed]
