# render/renderer.py
import logging, pygame
from typing import Dict, List, Optional

from comments.board import Comment
from config import RenderConfig
from notes.model import Origin
from notes.registry import KeyRegistry
from render.layout import KeyboardLayout

STATUS_H = 36
BTN_PAD_X = 12
BTN_GAP = 10
BUTTONS = ["LOAD MIDI", "LOAD COMMENTS", "LOAD KEYMAP", "SAVE KEYMAP", "POST", "MUTE", "QUIT"]

WHITE_FILL = (230, 230, 230)
BLACK_FILL = (18, 18, 20)
LOCAL_HL = (255, 240, 170)
LOCAL_HL_BLACK = (255, 200, 120)
REMOTE_HL = (150, 200, 255)
REMOTE_HL_BLACK = (90, 140, 230)
PLAYBACK_HL = (170, 235, 170)
PLAYBACK_HL_BLACK = (80, 170, 90)
PRESS_DROP = 6  # 按下時往下位移的像素


class Renderer:
    def __init__(self, cfg: RenderConfig, registry: KeyRegistry):
        pygame.init()
        self.cfg = cfg
        self.registry = registry
        self.screen = pygame.display.set_mode((cfg.window_w, cfg.window_h))
        pygame.display.set_caption("Piano Room")
        self.font = pygame.font.SysFont("consolas", 18)
        self.font_small = pygame.font.SysFont("consolas", 14)
        self.font_tiny = pygame.font.SysFont("consolas", 11)
        self.clock = pygame.time.Clock()
        self.button_rects: Dict[str, pygame.Rect] = {}
        self.comment_rects: Dict[str, pygame.Rect] = {}

        piano_w = cfg.window_w - cfg.comments_w - 20
        self.layout = KeyboardLayout(registry, 10, cfg.window_h - cfg.piano_h - 10, piano_w, cfg.piano_h)
        logging.debug("Keyboard layout: %d keys, %d white", len(registry), registry.white_count)

        self._takeover_t: Optional[float] = None

    def tick(self, fps: Optional[int] = None) -> float:
        return self.clock.tick(fps or self.cfg.fps) / 1000.0

    def begin_frame(self):
        self.screen.fill((58, 58, 74))

    def end_frame(self):
        pygame.display.flip()

    # ------- status bar -------
    def draw_status_bar(self, right_info_text: str = ""):
        pygame.draw.rect(self.screen, (24, 24, 28), (0, 0, self.cfg.window_w, STATUS_H))
        pygame.draw.line(self.screen, (60, 60, 66), (0, STATUS_H), (self.cfg.window_w, STATUS_H), 1)

        x = 10; self.button_rects.clear()
        for label in BUTTONS:
            surf = self.font_small.render(label, True, (220, 220, 230))
            rect = surf.get_rect(); rect.topleft = (x + BTN_PAD_X, (STATUS_H - rect.height)//2)
            box = pygame.Rect(x, 4, rect.width + BTN_PAD_X*2, STATUS_H - 8)
            pygame.draw.rect(self.screen, (40, 40, 46), box, border_radius=6)
            pygame.draw.rect(self.screen, (75, 75, 85), box, 1, border_radius=6)
            self.screen.blit(surf, rect)
            self.button_rects[label] = box
            x += box.width + BTN_GAP

        if right_info_text:
            right = self.font_small.render(right_info_text, True, (180, 180, 190))
            self.screen.blit(right, (self.cfg.window_w - right.get_width() - 10, (STATUS_H - right.get_height())//2))

    def button_at(self, pos) -> Optional[str]:
        for label, rect in self.button_rects.items():
            if rect.collidepoint(pos):
                return label
        return None

    # ------- piano -------
    @staticmethod
    def _key_fill(engine, name: str, black: bool):
        if not engine.is_pressed(name):
            return BLACK_FILL if black else WHITE_FILL
        origin = engine.origin_of(name)
        if origin is Origin.REMOTE:
            return REMOTE_HL_BLACK if black else REMOTE_HL
        if origin is Origin.PLAYBACK:
            return PLAYBACK_HL_BLACK if black else PLAYBACK_HL
        return LOCAL_HL_BLACK if black else LOCAL_HL

    def draw_keyboard(self, engine):
        lay = self.layout
        for r in lay.whites:
            pressed = engine.is_pressed(r.name)
            fill = self._key_fill(engine, r.name, False)
            dy = PRESS_DROP if pressed else 0
            rect = (r.x, r.y + dy, r.w - 1, r.h)
            pygame.draw.rect(self.screen, fill, rect)
            pygame.draw.rect(self.screen, (60, 60, 66), rect, 1)
            label = self.font_tiny.render(r.name, True, (90, 90, 100))
            self.screen.blit(label, (r.x + (r.w - label.get_width()) / 2, r.y + r.h - 16 + dy))

        for r in lay.blacks:
            pressed = engine.is_pressed(r.name)
            fill = self._key_fill(engine, r.name, True)
            dy = PRESS_DROP if pressed else 0
            rect = (r.x, r.y + dy, r.w, r.h)
            pygame.draw.rect(self.screen, fill, rect)
            pygame.draw.rect(self.screen, (60, 60, 66), rect, 1)

    # ------- comments -------
    def draw_comments(self, items: List[Comment]):
        x0 = self.cfg.window_w - self.cfg.comments_w
        panel = pygame.Rect(x0, STATUS_H + 10, self.cfg.comments_w - 10, self.layout.y0 - STATUS_H - 20)
        pygame.draw.rect(self.screen, (34, 34, 40), panel, border_radius=6)
        self.comment_rects.clear()

        y = panel.y + 8
        title = self.font.render("Comments", True, (220, 220, 230))
        self.screen.blit(title, (panel.x + 10, y)); y += title.get_height() + 8
        for c in items:
            if y > panel.bottom - 40:
                break
            text = c.content.replace("\n", " ")
            if len(text) > 40:
                text = text[:39] + "…"
            head = self.font_small.render(c.author, True, (160, 200, 160) if c.playable else (160, 160, 170))
            body = self.font_small.render(text, True, (220, 220, 230))
            box = pygame.Rect(panel.x + 6, y - 4, panel.w - 12, head.get_height() + body.get_height() + 12)
            if c.playable:
                pygame.draw.rect(self.screen, (46, 62, 50), box, border_radius=4)
                self.comment_rects[c.id] = box
            self.screen.blit(head, (box.x + 6, y))
            self.screen.blit(body, (box.x + 6, y + head.get_height() + 2))
            y = box.bottom + 6

    def comment_at(self, pos) -> Optional[str]:
        for cid, rect in self.comment_rects.items():
            if rect.collidepoint(pos):
                return cid
        return None

    # ------- comment entry -------
    def draw_compose(self, text: str):
        x0 = self.cfg.window_w - self.cfg.comments_w
        box = pygame.Rect(x0 + 6, self.layout.y0 - 58, self.cfg.comments_w - 22, 36)
        pygame.draw.rect(self.screen, (20, 20, 24), box, border_radius=6)
        pygame.draw.rect(self.screen, (160, 200, 160), box, 1, border_radius=6)
        shown = text[-34:] + "_"  # 只顯示尾端
        surf = self.font_small.render(shown, True, (230, 230, 240))
        self.screen.blit(surf, (box.x + 8, box.y + (box.height - surf.get_height()) // 2))
        hint = self.font_tiny.render("ENTER post · ESC cancel", True, (150, 150, 160))
        self.screen.blit(hint, (box.x + 2, box.bottom + 3))

    # ------- toast -------
    def draw_toast(self, msg: str):
        if not msg:
            return
        surf = self.font.render(msg, True, (255, 255, 255))
        x = (self.cfg.window_w - surf.get_width()) // 2
        bg = pygame.Rect(x - 12, STATUS_H + 14, surf.get_width() + 24, surf.get_height() + 10)
        pygame.draw.rect(self.screen, (20, 20, 24), bg, border_radius=6)
        self.screen.blit(surf, (x, STATUS_H + 19))

    # ------- takeover -------
    def start_takeover(self):
        if self._takeover_t is None:
            self._takeover_t = 0.0

    @property
    def takeover_active(self) -> bool:
        return self._takeover_t is not None

    def draw_takeover(self, dt: float):
        """A runner crosses the screen, then the window is wiped for good."""
        self._takeover_t += dt
        progress = self._takeover_t * 1000.0 / max(1, self.cfg.takeover_ms)
        if progress >= 1.0:
            self.screen.fill((0, 0, 0))
            return
        size = 200
        x = -size + (self.cfg.window_w + size) * progress
        y = self.cfg.window_h // 2 - size // 2
        pygame.draw.ellipse(self.screen, (196, 140, 80), (x, y + 60, size, size * 0.55))
        pygame.draw.circle(self.screen, (196, 140, 80), (int(x + size * 0.95), y + 60), 38)
        pygame.draw.circle(self.screen, (20, 20, 20), (int(x + size * 1.05), y + 50), 5)
