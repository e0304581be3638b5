# audio/sampler.py
import logging, os
from typing import Dict, Optional

import numpy as np
import pygame

from audio.backend import pitch_ratio
from config import AudioConfig
from utils.path import resource_path

DEFAULT_SAMPLE = "static/audio/key-press.wav"
BASE_FREQ = 261.63  # 內建音色以 C4 為基準


def resample(data: np.ndarray, ratio: float) -> np.ndarray:
    """Linear-interpolation resample: ratio 2.0 plays an octave up (half the length)."""
    if ratio <= 0:
        raise ValueError("ratio must be positive")
    n_src = data.shape[0]
    n_dst = max(1, int(round(n_src / ratio)))
    if n_dst == n_src:
        return data.copy()
    src_x = np.arange(n_src, dtype=np.float64)
    dst_x = np.linspace(0.0, n_src - 1, n_dst)
    if data.ndim == 1:
        return np.interp(dst_x, src_x, data).astype(np.float32)
    cols = [np.interp(dst_x, src_x, data[:, ch]) for ch in range(data.shape[1])]
    return np.column_stack(cols).astype(np.float32)


def synth_tone(sample_rate: int, freq: float = BASE_FREQ, seconds: float = 0.8) -> np.ndarray:
    """Plucked-ish tone used when no sample file is available."""
    t = np.arange(int(sample_rate * seconds), dtype=np.float64) / sample_rate
    env = np.exp(-t * 5.0)
    attack = np.minimum(1.0, t / 0.005)
    wave = np.sin(2 * np.pi * freq * t) + 0.35 * np.sin(4 * np.pi * freq * t) + 0.12 * np.sin(6 * np.pi * freq * t)
    return (0.45 * wave * env * attack).astype(np.float32)


def to_mixer_array(data: np.ndarray, channels: int) -> np.ndarray:
    """float32 [-1, 1] -> int16 in the mixer's channel layout."""
    if data.ndim == 1 and channels > 1:
        data = np.repeat(data[:, None], channels, axis=1)
    elif data.ndim == 2 and channels == 1:
        data = data.mean(axis=1)
    elif data.ndim == 2 and data.shape[1] != channels:
        data = np.repeat(data[:, :1], channels, axis=1)
    pcm = np.clip(data, -1.0, 1.0) * 32767.0
    return np.ascontiguousarray(pcm.astype(np.int16))


class SamplePlayer:
    """
    One-shot sample, pitch-shifted per key:
    - play(semitones) 以 2^(s/12) 的速率重新取樣後播放
    - 每個半音的 Sound 只做一次，之後直接重播
    """
    def __init__(self, cfg: AudioConfig):
        self.cfg = cfg
        self.available = False
        self.channels = cfg.channels
        self._base: Optional[np.ndarray] = None
        self._cache: Dict[int, "pygame.mixer.Sound"] = {}

        try:
            pygame.mixer.init(frequency=cfg.sample_rate, size=-16, channels=cfg.channels)
            init = pygame.mixer.get_init()
            if not init:
                logging.warning("[Sampler] mixer did not initialise")
                return
            self.sample_rate, _fmt, self.channels = init
            pygame.mixer.set_num_channels(max(8, cfg.max_voices))
            self._base = self._load_base()
            self.available = True
            logging.info("[Sampler] ready: %d Hz, %d ch, %d frames",
                         self.sample_rate, self.channels, self._base.shape[0])
        except pygame.error as e:
            logging.warning("[Sampler] mixer init failed: %s", e)

    def _load_base(self) -> np.ndarray:
        path = self.cfg.sample_path or resource_path(DEFAULT_SAMPLE)
        if path and os.path.exists(path):
            try:
                snd = pygame.mixer.Sound(path)
                raw = pygame.sndarray.array(snd).astype(np.float32) / 32768.0
                return raw
            except Exception:
                logging.warning("[Sampler] cannot load %s, using built-in tone", path, exc_info=True)
        elif self.cfg.sample_path:
            logging.warning("[Sampler] sample not found: %s", path)
        return synth_tone(self.sample_rate)

    def _sound_for(self, semitones: int):
        snd = self._cache.get(semitones)
        if snd is None:
            shifted = resample(self._base, pitch_ratio(semitones))
            snd = pygame.sndarray.make_sound(to_mixer_array(shifted, self.channels))
            self._cache[semitones] = snd
        return snd

    def play(self, semitones: int) -> None:
        if not self.available:
            return
        self._sound_for(int(semitones)).play()

    def close(self):
        self._cache.clear()
        if self.available:
            pygame.mixer.quit()
        self.available = False
