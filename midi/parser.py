# midi/parser.py
import logging
import mido
from typing import List, Tuple
from notes.registry import KeyRegistry

def parse_midi_onsets(path: str) -> List[Tuple[float, int]]:
    """(start seconds, MIDI pitch) of every note-on, in time order."""
    mid = mido.MidiFile(path)
    tpb = mid.ticks_per_beat
    tempo = 500000  # default 120 bpm
    time_sec = 0.0
    onsets: List[Tuple[float, int]] = []

    for msg in mido.merge_tracks(mid.tracks):
        time_sec += mido.tick2second(msg.time, tpb, tempo)
        if msg.is_meta:
            if msg.type == 'set_tempo':
                tempo = msg.tempo
        elif msg.type == 'note_on' and msg.velocity > 0:
            if getattr(msg, "channel", 0) == 9:
                continue  # GM 打擊聲部沒有音高
            onsets.append((time_sec, msg.note))
    onsets.sort()
    return onsets

def midi_to_note_ids(path: str, registry: KeyRegistry, reference_pitch: int = 60) -> List[str]:
    """Melody of a MIDI file as key names; notes outside the keyboard are dropped."""
    out: List[str] = []
    dropped = 0
    for _start, pitch in parse_midi_onsets(path):
        note = registry.note_for_offset(pitch - reference_pitch)
        if note is None:
            dropped += 1
            continue
        out.append(note.name)
    if dropped:
        logging.info("MIDI import: %d notes outside the keyboard skipped", dropped)
    return out
