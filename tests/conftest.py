import pytest

from config import AppConfig
from net.room import LocalHub
from notes.registry import KeyRegistry
from playback.engine import PlaybackEngine
from playback.session import PianoSession
from timeline.scheduler import Scheduler


class RecordingAudio:
    available = True

    def __init__(self):
        self.played = []

    def play(self, semitones):
        self.played.append(semitones)


class BrokenAudio:
    available = True

    def play(self, semitones):
        raise RuntimeError("audio context suspended")


@pytest.fixture
def registry():
    return KeyRegistry()

@pytest.fixture
def scheduler():
    return Scheduler()

@pytest.fixture
def audio():
    return RecordingAudio()

@pytest.fixture
def engine(registry, scheduler, audio):
    return PlaybackEngine(registry, scheduler, audio)

@pytest.fixture
def hub():
    return LocalHub()

@pytest.fixture
def make_session(hub):
    def _make(on_secret=None):
        return PianoSession(AppConfig(), room=hub.join(), audio=RecordingAudio(), on_secret=on_secret)
    return _make

@pytest.fixture
def broken_audio():
    return BrokenAudio()
