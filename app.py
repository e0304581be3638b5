# app.py
import logging
import pygame
from typing import Dict, List, Optional

from audio.backend import make_audio
from config import AppConfig
from input.keymap import DEFAULT_KEYMAP, load_keymap, note_for_char, save_keymap
from midi.parser import midi_to_note_ids
from net.room import Room
from playback.session import PianoSession
from render.renderer import Renderer
from timeline.scheduler import Scheduler
from utils.crashlog import log_exception


def pick_file_dialog(title: str, patterns: list[tuple[str, str]]) -> Optional[str]:
    try:
        import tkinter as tk
        from tkinter import filedialog
        root = tk.Tk(); root.withdraw()
        file = filedialog.askopenfilename(title=title, filetypes=patterns)
        root.update(); root.destroy()
        return file or None
    except Exception:
        logging.warning("File dialog unavailable", exc_info=True)
        return None

def save_file_dialog(title: str, default_ext: str, patterns: list[tuple[str, str]]) -> Optional[str]:
    try:
        import tkinter as tk
        from tkinter import filedialog
        root = tk.Tk(); root.withdraw()
        file = filedialog.asksaveasfilename(title=title, defaultextension=default_ext, filetypes=patterns)
        root.update(); root.destroy()
        return file or None
    except Exception:
        logging.warning("File dialog unavailable", exc_info=True)
        return None

class App:
    def __init__(self, cfg: AppConfig, room: Optional[Room] = None):
        self.cfg = cfg
        self.scheduler = Scheduler()
        self.audio = make_audio(cfg.audio, self.scheduler)
        self.session = PianoSession(cfg, room=room, audio=self.audio,
                                    scheduler=self.scheduler, on_secret=self._on_secret)
        self.renderer = Renderer(cfg.render, self.session.registry)
        self.board = self.session.board
        self.draft: Optional[str] = None  # 非 None 表示正在輸入留言
        self.keymap: Dict[str, str] = dict(DEFAULT_KEYMAP)
        self.muted = False

        # UI 訊息（toast）
        self._msg = ""
        self._msg_time = 0.0

    # ---------- UI 訊息 ----------
    def _toast(self, msg: str, secs: float = 4.0):
        self._msg = msg
        self._msg_time = max(self._msg_time, secs)

    def _on_secret(self):
        logging.info("Secret sequence played: starting takeover")
        self.renderer.start_takeover()

    # ---------- Loading ----------
    def load_comments(self, path: str) -> bool:
        try:
            n = self.board.load_file(path)
            self._toast(f"Loaded {n} comments ✓", 2.0)
            return True
        except Exception as e:
            log_exception("load_comments", e)
            logging.error("Failed to load comments from %s", path, exc_info=True)
            self._toast("Failed to load comments (see logs)", 6.0)
            return False

    def play_midi(self, path: str) -> bool:
        try:
            notes = midi_to_note_ids(path, self.session.registry, self.cfg.audio.reference_pitch)
        except Exception as e:
            log_exception("play_midi", e)
            logging.error("Failed to read MIDI %s", path, exc_info=True)
            self._toast("Failed to load MIDI (see logs)", 6.0)
            return False
        if not self.session.play_notes(notes):
            self._toast("No playable notes in that MIDI", 3.0)
            return False
        self._toast(f"Playing {len(notes)} notes", 2.0)
        return True

    def load_keymap_file(self, path: str) -> bool:
        try:
            self.keymap = load_keymap(path, self.session.registry)
            self._toast(f"Keymap loaded ({len(self.keymap)} keys)", 2.0)
            return True
        except Exception as e:
            log_exception("load_keymap", e)
            logging.error("Failed to load keymap %s", path, exc_info=True)
            self._toast("Failed to load keymap (see logs)", 6.0)
            return False

    def _save_keymap_interactive(self):
        path = save_file_dialog("Save Keymap JSON", ".json", [("JSON", "*.json"), ("All files", "*.*")])
        if not path: return
        try:
            save_keymap(path, self.keymap)
            self._toast("Keymap saved ✓", 2.0)
        except OSError:
            logging.error("Failed to save keymap to %s", path, exc_info=True)
            self._toast("Failed to save keymap", 4.0)

    def _toggle_mute(self):
        self.muted = not self.muted
        # 靜音時 engine 不再送聲音，畫面照常
        self.session.engine.audio = None if self.muted else self.audio

    # ---------- Comment entry ----------
    def post_comment(self, text: str) -> bool:
        c = self.session.post_comment(text)
        if c is None:
            return False
        self._toast("Posted ♪ (click it to play)" if c.playable else "Posted ✓", 2.0)
        return True

    def _on_draft_key(self, e):
        # 輸入留言時鍵盤不彈琴
        if e.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            text, self.draft = self.draft, None
            self.post_comment(text)
        elif e.key == pygame.K_ESCAPE:
            self.draft = None
        elif e.key == pygame.K_BACKSPACE:
            self.draft = self.draft[:-1]
        elif e.unicode and e.unicode.isprintable():
            self.draft += e.unicode

    # ---------- Events ----------
    def _on_button(self, label: str) -> bool:
        if label == "LOAD MIDI":
            path = pick_file_dialog("Select a MIDI file", [("MIDI files", "*.mid *.midi"), ("All files", "*.*")])
            if path: self.play_midi(path)
        elif label == "LOAD COMMENTS":
            path = pick_file_dialog("Select a comments file", [("Text", "*.txt"), ("All files", "*.*")])
            if path: self.load_comments(path)
        elif label == "LOAD KEYMAP":
            path = pick_file_dialog("Load Keymap JSON", [("JSON", "*.json"), ("All files", "*.*")])
            if path: self.load_keymap_file(path)
        elif label == "SAVE KEYMAP":
            self._save_keymap_interactive()
        elif label == "POST":
            self.draft = ""
        elif label == "MUTE":
            self._toggle_mute()
        elif label == "QUIT":
            return False
        return True

    def _on_mouse_down(self, pos) -> bool:
        label = self.renderer.button_at(pos)
        if label:
            return self._on_button(label)
        cid = self.renderer.comment_at(pos)
        if cid:
            c = self.board.get(cid)
            if c and c.playable:
                self.session.play_notes(c.notes)
            return True
        note = self.renderer.layout.key_at(*pos)
        if note:
            self.session.press_local(note)
        return True

    def handle_event(self, e) -> bool:
        if e.type == pygame.QUIT:
            return False
        if self.renderer.takeover_active:
            return True  # 接管後不再接受輸入
        if e.type == pygame.KEYDOWN:
            if self.draft is not None:
                self._on_draft_key(e)
                return True
            if e.key == pygame.K_ESCAPE:
                return False
            note = note_for_char(self.keymap, e.unicode)
            if note:
                self.session.press_local(note)
        elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            return self._on_mouse_down(e.pos)
        return True

    # ---------- Main loop ----------
    def run(self, initial_text: Optional[str] = None, initial_midi: Optional[str] = None):
        if initial_text:
            if not self.session.play_text(initial_text):
                self._toast("Nothing playable in --play text", 3.0)
        if initial_midi:
            self.play_midi(initial_midi)

        running = True
        try:
            while running:
                dt = self.renderer.tick()
                for e in pygame.event.get():
                    if not self.handle_event(e):
                        running = False; break
                if not running: break

                self.session.pump(dt)

                # ===== 訊息倒數（toast） =====
                if self._msg_time > 0:
                    self._msg_time -= dt
                    if self._msg_time <= 0:
                        self._msg_time = 0
                        self._msg = ""

                # ----- Render -----
                self.renderer.begin_frame()
                if self.renderer.takeover_active:
                    self.renderer.draw_takeover(dt)
                    self.renderer.end_frame()
                    continue

                room = self.session.room
                right_fields: List[str] = [
                    f"ROOM: {getattr(room, 'room', 'local') if room else 'offline'}",
                    f"AUDIO: {'MUTED' if self.muted else ('ON' if getattr(self.audio, 'available', False) else 'OFF')}",
                    f"KEYS: {len(self.keymap)}",
                ]
                self.renderer.draw_status_bar(right_info_text="  |  ".join(right_fields))
                self.renderer.draw_comments(self.board.items)
                self.renderer.draw_keyboard(self.session.engine)
                if self.draft is not None:
                    self.renderer.draw_compose(self.draft)
                self.renderer.draw_toast(self._msg)
                self.renderer.end_frame()
        finally:
            self.session.engine.audio = self.audio  # 靜音中也要正確關閉音源
            self.session.close()
            pygame.quit()
