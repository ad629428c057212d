"""MIDI port access (mido)."""
