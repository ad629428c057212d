"""Shared utilities for the terminal UI."""

NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']

def note_to_name(midi_note):
    """Convert MIDI note number to note name like 'F#4' (middle C = C4)."""
    octave = midi_note // 12 - 1
    note = NOTE_NAMES[midi_note % 12]
    return f"{note}{octave}"

def is_yes(answer):
    """True for a 'y' answer to a (y/N) prompt."""
    return answer.strip().lower() == "y"
