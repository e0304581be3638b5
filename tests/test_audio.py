import numpy as np
import pytest

from audio.backend import NullAudio, make_audio, pitch_ratio
from audio.sampler import resample, synth_tone, to_mixer_array
from config import AudioConfig


def test_pitch_ratio():
    assert pitch_ratio(0) == 1.0
    assert pitch_ratio(12) == pytest.approx(2.0)
    assert pitch_ratio(-12) == pytest.approx(0.5)
    assert pitch_ratio(7) == pytest.approx(1.4983, rel=1e-4)

def test_resample_octave_up_halves_length():
    data = synth_tone(8000, seconds=0.5)
    up = resample(data, pitch_ratio(12))
    down = resample(data, pitch_ratio(-12))
    assert len(up) == len(data) // 2
    assert len(down) == len(data) * 2
    assert up.dtype == np.float32

def test_resample_stereo():
    data = np.zeros((100, 2), dtype=np.float32)
    assert resample(data, 2.0).shape == (50, 2)
    with pytest.raises(ValueError):
        resample(data, 0)

def test_mixer_array_layout():
    mono = np.array([0.0, 0.5, -1.0, 2.0], dtype=np.float32)
    st = to_mixer_array(mono, 2)
    assert st.shape == (4, 2) and st.dtype == np.int16
    assert st[3, 0] == 32767
    assert to_mixer_array(np.zeros((4, 2), dtype=np.float32), 1).shape == (4,)

def test_none_backend_is_silent():
    a = make_audio(AudioConfig(backend="none"))
    assert isinstance(a, NullAudio)
    a.play(3)


class _NoDevicePlayer:
    available = False

    def __init__(self, *args):
        pass

    def play(self, semitones):
        raise AssertionError("silent backend must not be used")


class _ExplodingPlayer:
    def __init__(self, *args):
        raise RuntimeError("mixer init failed")


@pytest.mark.parametrize("player", [_NoDevicePlayer, _ExplodingPlayer])
def test_sample_backend_failure_falls_back_to_silence(monkeypatch, player):
    monkeypatch.setattr("audio.sampler.SamplePlayer", player)
    a = make_audio(AudioConfig(backend="sample"))
    assert isinstance(a, NullAudio)

@pytest.mark.parametrize("player", [_NoDevicePlayer, _ExplodingPlayer])
def test_midi_backend_failure_falls_back_to_silence(monkeypatch, player):
    monkeypatch.setattr("audio.synth.MidiSynth", player)
    assert isinstance(make_audio(AudioConfig(backend="midi")), NullAudio)

def test_session_without_audio_still_moves_keys(monkeypatch):
    from config import AppConfig
    from playback.session import PianoSession
    monkeypatch.setattr("audio.sampler.SamplePlayer", _ExplodingPlayer)
    a = make_audio(AudioConfig(backend="sample"))
    s = PianoSession(AppConfig(), audio=a)
    assert s.press_local("C4")
    assert s.engine.is_pressed("C4")
    s.pump(0.2)
    assert not s.engine.is_pressed("C4")
