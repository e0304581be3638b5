import pytest
from notes.model import Origin
from playback.engine import PlaybackEngine


def test_press_plays_pitch_and_depresses(engine, audio, scheduler):
    assert engine.press("E4")
    assert audio.played == [4]
    assert engine.is_pressed("E4")
    assert engine.pressed_notes() == ["E4"]
    scheduler.advance_to(0.149)
    assert engine.is_pressed("e4")
    scheduler.advance_to(0.150)
    assert not engine.is_pressed("E4")

def test_double_press_does_not_restart_dwell(engine, audio, scheduler):
    engine.press("C4")
    scheduler.advance_to(0.1)
    engine.press("C4")
    assert audio.played == [0, 0]
    assert scheduler.pending == 1
    scheduler.advance_to(0.15)
    assert not engine.is_pressed("C4")
    assert scheduler.pending == 0

def test_keys_are_independent(engine, scheduler):
    engine.press("C4")
    scheduler.advance_to(0.1)
    engine.press("D4")
    scheduler.advance_to(0.15)
    assert not engine.is_pressed("C4")
    assert engine.is_pressed("D4")
    scheduler.advance_to(0.25)
    assert engine.pressed_notes() == []

def test_press_again_after_release(engine, scheduler, audio):
    engine.press("C4")
    scheduler.advance_to(0.2)
    engine.press("C4")
    assert engine.is_pressed("C4")
    scheduler.advance_to(0.349)
    assert engine.is_pressed("C4")
    scheduler.advance_to(0.35)
    assert not engine.is_pressed("C4")

def test_stale_release_is_ignored(engine, scheduler):
    engine.press("C4")
    st = engine._states["C4"]
    # 模擬舊的放開回呼在新一次按下之後才到
    engine._release("C4", st.token)
    engine.press("C4")
    engine._release("C4", st.token - 1)
    assert engine.is_pressed("C4")

def test_unknown_note_is_ignored(engine, audio, scheduler):
    assert engine.press("H9") is False
    assert engine.press(None) is False
    assert audio.played == []
    assert scheduler.pending == 0

def test_origin_is_tracked(engine):
    engine.press("A2", origin=Origin.REMOTE)
    assert engine.origin_of("A2") is Origin.REMOTE
    assert engine.origin_of("B2") is None

def test_broken_audio_degrades_to_visual(registry, scheduler, broken_audio):
    eng = PlaybackEngine(registry, scheduler, broken_audio)
    assert eng.press("C4")
    assert eng.is_pressed("C4")

def test_no_audio(registry, scheduler):
    eng = PlaybackEngine(registry, scheduler, None)
    assert eng.press("C4")

def test_play_sequence_schedule(engine, scheduler, audio):
    assert engine.play_sequence(["C4", "E4", "G4"]) == 3
    assert scheduler.fire_times() == pytest.approx([0.0, 0.35, 0.7])
    scheduler.advance_to(0.0)
    assert audio.played == [0]
    scheduler.advance_to(0.35)
    assert audio.played == [0, 4]
    scheduler.advance_to(0.7)
    assert audio.played == [0, 4, 7]

def test_play_sequence_repeated_note_still_sounds(engine, scheduler, audio):
    engine.play_sequence(["D2", "D2"])
    scheduler.advance_to(1.0)
    assert audio.played == [-22, -22]

def test_play_sequence_empty_or_invalid(engine, scheduler):
    assert engine.play_sequence([]) == 0
    assert engine.play_sequence(["X1", "hello"]) == 0
    assert engine.play_sequence(None) == 0
    assert scheduler.pending == 0

def test_play_sequence_invalid_entry_keeps_its_slot(engine, scheduler, audio):
    assert engine.play_sequence(["C4", "bogus", "g4"]) == 2
    # 第二格是空拍，G4 仍在第三格
    assert scheduler.fire_times() == pytest.approx([0.0, 0.7])
    scheduler.advance_to(0.35)
    assert audio.played == [0]
    assert engine.pressed_notes() == []
    scheduler.advance_to(0.7)
    assert audio.played == [0, 7]
    assert engine.is_pressed("G4")

def test_play_sequence_leading_invalid_entry_delays_first_note(engine, scheduler):
    engine.play_sequence(["zz", "D2"])
    assert scheduler.fire_times() == pytest.approx([0.35])

def test_play_sequence_presses_have_playback_origin(engine, scheduler):
    engine.play_sequence(["C4"])
    scheduler.advance_to(0.0)
    assert engine.is_pressed("C4")
    assert engine.origin_of("C4") is Origin.PLAYBACK
