import mido
from midi.parser import midi_to_note_ids, parse_midi_onsets
from notes.registry import KeyRegistry


def write_midi(path, events):
    mid = mido.MidiFile(ticks_per_beat=480)
    track = mido.MidiTrack()
    mid.tracks.append(track)
    for msg in events:
        track.append(msg)
    mid.save(path)
    return str(path)

def test_melody_in_order(tmp_path):
    path = write_midi(tmp_path / "tune.mid", [
        mido.Message("note_on", note=60, velocity=90, time=0),
        mido.Message("note_off", note=60, velocity=0, time=240),
        mido.Message("note_on", note=64, velocity=90, time=0),
        mido.Message("note_on", note=64, velocity=0, time=240),
        mido.Message("note_on", note=67, velocity=90, time=0),
        mido.Message("note_off", note=67, velocity=0, time=240),
    ])
    assert [p for _, p in parse_midi_onsets(path)] == [60, 64, 67]
    assert midi_to_note_ids(path, KeyRegistry()) == ["C4", "E4", "G4"]

def test_out_of_range_and_drums_dropped(tmp_path):
    path = write_midi(tmp_path / "wide.mid", [
        mido.Message("note_on", note=20, velocity=90, time=0),
        mido.Message("note_on", note=38, velocity=90, channel=9, time=10),
        mido.Message("note_on", note=38, velocity=90, time=10),
        mido.Message("note_on", note=100, velocity=90, time=10),
    ])
    assert midi_to_note_ids(path, KeyRegistry()) == ["D2"]
