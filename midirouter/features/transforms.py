"""Per-output message rewrites: channel override and note transposition.

Each transform takes the message plus its (optional) parameter and returns a
new message together with a Transformation describing what changed. The input
message is never modified, so the original stays available for logging and for
the other outputs.
"""
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from midirouter.constants import CHANNEL_MASK, NOTE_MAX, NOTE_MIN, TYPE_MASK
from midirouter.features.message import MidiMessage, channel_of


@dataclass(frozen=True)
class Transformation:
    """Before/after values of one output's rewrite. Channels are one-based."""
    channel_before: Optional[int] = None
    channel_after: Optional[int] = None
    note_before: Optional[int] = None
    note_after: Optional[int] = None

    @property
    def channel_changed(self) -> bool:
        return self.channel_before is not None and self.channel_after is not None

    @property
    def note_changed(self) -> bool:
        return self.note_before is not None and self.note_after is not None

    @property
    def is_empty(self) -> bool:
        return not (self.channel_changed or self.note_changed)

    def merged(self, other: "Transformation") -> "Transformation":
        """Combine two records, fields set in `other` win."""
        changes = {k: v for k, v in vars(other).items() if v is not None}
        return replace(self, **changes)


NO_CHANGE = Transformation()


def apply_channel_override(msg: MidiMessage, override_channel: Optional[int]) -> Tuple[MidiMessage, Transformation]:
    """Set the channel nibble of a channel message to `override_channel` (1-16)."""
    if override_channel is None:
        return msg, NO_CHANGE

    original = channel_of(msg.status)
    if original is None:
        # system messages have no channel to rewrite
        return msg, NO_CHANGE

    status = (msg.status & TYPE_MASK) | ((override_channel - 1) & CHANNEL_MASK)
    new_msg = msg.replace_byte(0, status)
    return new_msg, Transformation(channel_before=original + 1, channel_after=override_channel)


def apply_note_transpose(msg: MidiMessage, semitones: Optional[int]) -> Tuple[MidiMessage, Transformation]:
    """Shift the key of a Note On/Off by `semitones`.

    A shift that would leave 0..127 is rejected and the message goes out at
    its original pitch (no clipping to the boundary).
    """
    if not semitones or not msg.is_note:
        return msg, NO_CHANGE

    key = msg.note
    new_key = key + semitones
    if new_key < NOTE_MIN or new_key > NOTE_MAX:
        return msg, NO_CHANGE

    return msg.replace_byte(1, new_key), Transformation(note_before=key, note_after=new_key)
