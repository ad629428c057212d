"""Per-output filter predicates.
Both filters are pure: message in, bool out.
"""
from dataclasses import dataclass

from midirouter.features.message import MidiMessage, channel_of


@dataclass(frozen=True)
class ChannelFilter:
    channel: int  # 1-16

    def matches(self, msg: MidiMessage) -> bool:
        """Pass channel messages on our channel; channel-less messages always pass."""
        ch = channel_of(msg.status)
        if ch is None:
            return True
        return ch + 1 == self.channel


@dataclass(frozen=True)
class NoteRangeFilter:
    min_note: int  # 0-127, inclusive
    max_note: int

    @classmethod
    def between(cls, a: int, b: int) -> "NoteRangeFilter":
        """Build from two notes played in either order."""
        if a > b:
            a, b = b, a
        return cls(min_note=a, max_note=b)

    def matches(self, msg: MidiMessage) -> bool:
        # only note on/off are range-checked
        if not msg.is_note:
            return True
        return self.min_note <= msg.note <= self.max_note
