# audio/backend.py
import logging
from config import AudioConfig


def pitch_ratio(semitones: float) -> float:
    """Playback-rate multiplier that shifts a sample by the given semitones."""
    return 2.0 ** (semitones / 12.0)


class NullAudio:
    """Silent backend: the piano still animates, nothing is heard."""
    available = False

    def play(self, semitones: int) -> None:
        return None

    def close(self) -> None:
        return None


def make_audio(cfg: AudioConfig, scheduler=None):
    """Pick the audio backend; any failure falls back to silence."""
    mode = (cfg.backend or "none").lower()
    try:
        if mode == "sample":
            from audio.sampler import SamplePlayer
            backend = SamplePlayer(cfg)
        elif mode == "midi":
            from audio.synth import MidiSynth
            backend = MidiSynth(cfg, scheduler)
        else:
            return NullAudio()
    except Exception:
        logging.warning("Audio backend %r unavailable, running silent", mode, exc_info=True)
        return NullAudio()
    if not getattr(backend, "available", False):
        logging.warning("Audio backend %r has no output device, running silent", mode)
        return NullAudio()
    return backend
