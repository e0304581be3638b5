# ========================= config.py =========================
from dataclasses import dataclass, field
from typing import Optional, Tuple

@dataclass
class KeyboardConfig:
    first_octave: int = 2
    last_octave: int = 7          # keyboard ends on C{last_octave}
    reference_note: str = "C4"    # offset 0

@dataclass
class PlaybackConfig:
    dwell_ms: int = 150           # key stays down this long
    step_ms: int = 350            # gap between notes of a played sequence

    @property
    def dwell_s(self) -> float:
        return self.dwell_ms / 1000.0

    @property
    def step_s(self) -> float:
        return self.step_ms / 1000.0

@dataclass
class AudioConfig:
    backend: str = "sample"       # "sample" | "midi" | "none"
    sample_path: Optional[str] = None
    sample_rate: int = 44100
    channels: int = 2
    max_voices: int = 24
    midi_note_ms: int = 400
    reference_pitch: int = 60     # MIDI number of the offset-0 key

@dataclass
class NetConfig:
    url: Optional[str] = None     # ws://host:port/...; None = offline
    room: str = "lobby"
    username: str = "anonymous"  # 發留言時的作者名

@dataclass
class SecretConfig:
    sequence: Tuple[str, ...] = ("D2", "D2", "D3", "A2")

@dataclass
class RenderConfig:
    window_w: int = 1600
    window_h: int = 900
    piano_h: int = 220
    comments_w: int = 360
    fps: int = 60
    takeover_ms: int = 2500

@dataclass
class AppConfig:
    keyboard: KeyboardConfig = field(default_factory=KeyboardConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    net: NetConfig = field(default_factory=NetConfig)
    secret: SecretConfig = field(default_factory=SecretConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
