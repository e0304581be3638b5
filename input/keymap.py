# ========================= input/keymap.py =========================
import json, logging
from typing import Dict, Optional
from notes.registry import KeyRegistry

# 電腦鍵盤字元 -> 琴鍵（Shift 後的符號/大寫字母是升記號）
DEFAULT_KEYMAP: Dict[str, str] = {
    '1': 'C2', '!': 'C#2', '2': 'D2', '@': 'D#2', '3': 'E2', '4': 'F2', '$': 'F#2', '5': 'G2', '%': 'G#2', '6': 'A2', '^': 'A#2', '7': 'B2',
    '8': 'C3', '*': 'C#3', '9': 'D3', '(': 'D#3', '0': 'E3', 'q': 'F3', 'Q': 'F#3', 'w': 'G3', 'W': 'G#3', 'e': 'A3', 'E': 'A#3', 'r': 'B3',
    't': 'C4', 'T': 'C#4', 'y': 'D4', 'Y': 'D#4', 'u': 'E4', 'i': 'F4', 'I': 'F#4', 'o': 'G4', 'O': 'G#4', 'p': 'A4', 'P': 'A#4', 'a': 'B4',
    's': 'C5', 'S': 'C#5', 'd': 'D5', 'D': 'D#5', 'f': 'E5', 'g': 'F5', 'G': 'F#5', 'h': 'G5', 'H': 'G#5', 'j': 'A5', 'J': 'A#5', 'k': 'B5',
    'l': 'C6', 'L': 'C#6', 'z': 'D6', 'Z': 'D#6', 'x': 'E6', 'c': 'F6', 'C': 'F#6', 'v': 'G6', 'V': 'G#6', 'b': 'A6', 'B': 'A#6', 'n': 'B6',
    'm': 'C7',
}

def note_for_char(kmap: Dict[str, str], char: str) -> Optional[str]:
    if not char:
        return None
    return kmap.get(char)

def serialize_keymap(kmap: Dict[str, str]) -> dict:
    return dict(sorted(kmap.items(), key=lambda kv: kv[1]))

def deserialize_keymap(obj: dict, registry: KeyRegistry) -> Dict[str, str]:
    """char -> note JSON 還原；不認識的琴鍵或多字元的按鍵會被略過。"""
    if not isinstance(obj, dict):
        raise ValueError("keymap JSON must be an object")
    out: Dict[str, str] = {}
    for ch, name in obj.items():
        note = registry.get(name)
        if len(str(ch)) != 1 or note is None:
            logging.warning("keymap: skipping %r -> %r", ch, name)
            continue
        out[str(ch)] = note.name
    return out

def save_keymap(path: str, kmap: Dict[str, str]):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_keymap(kmap), f, ensure_ascii=False, indent=2)

def load_keymap(path: str, registry: KeyRegistry) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        return deserialize_keymap(json.load(f), registry)
