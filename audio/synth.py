# audio/synth.py
import logging
import pygame.midi

from config import AudioConfig

DRUM_CH = 9  # GM: ch10(索引9)為打擊，避免使用


class MidiSynth:
    """
    系統 MIDI 音源：
    - play(semitones) 送出 note_on(reference_pitch + semitones)
    - note_off 由 Scheduler 在 midi_note_ms 後送出（以 token 精準關閉該次觸發）
    - 沒有 scheduler 時不會自動 note_off，只在 close() 時全部關閉
    """
    def __init__(self, cfg: AudioConfig, scheduler=None):
        self.cfg = cfg
        self.scheduler = scheduler
        self.midi_out = None
        self.available = False

        self.channels = [ch for ch in range(16) if ch != DRUM_CH]
        self._rr_index = 0
        self._next_token = 1
        self._token_map = {}  # token -> (ch, pitch)

        try:
            pygame.midi.init()
            dev = pygame.midi.get_default_output_id()
            if dev == -1:
                logging.warning("[Synth] No MIDI output device found")
                return
            self.midi_out = pygame.midi.Output(dev)
            for ch in self.channels:
                self.midi_out.set_instrument(0, ch)  # Acoustic Grand
            self.available = True
            logging.info("[Synth] Using system MIDI out (device %d)", dev)
        except Exception as e:
            logging.warning("[Synth] MIDI init failed: %s", e)

    def _alloc_channel(self) -> int:
        ch = self.channels[self._rr_index % len(self.channels)]
        self._rr_index += 1
        return ch

    def play(self, semitones: int, velocity: int = 100) -> None:
        if not (self.available and self.midi_out):
            return
        pitch = max(0, min(127, self.cfg.reference_pitch + int(semitones)))
        ch = self._alloc_channel()
        self.midi_out.note_on(pitch, max(1, min(int(velocity), 127)), ch)
        token = self._next_token; self._next_token += 1
        self._token_map[token] = (ch, pitch)
        if self.scheduler is not None:
            self.scheduler.call_later(self.cfg.midi_note_ms / 1000.0, self.note_off_token, token)

    def note_off_token(self, token: int):
        ch, p = self._token_map.pop(int(token), (None, None))
        if ch is None or not self.midi_out:
            return
        try:
            self.midi_out.note_off(p, 0, ch)
        except Exception:
            logging.debug("[Synth] note_off failed for %s", p, exc_info=True)

    def close(self):
        try:
            if self.midi_out:
                for token in list(self._token_map):
                    self.note_off_token(token)
                self.midi_out.close()
        except Exception:
            logging.debug("[Synth] close failed", exc_info=True)
        pygame.midi.quit()
        self.midi_out = None
        self.available = False
