"""Raw MIDI message model shared by filters, transforms and reporting.
- Holds the event as immutable bytes (status + data)
- Decodes channel/note/velocity on demand, never stores them
- Converts to/from mido.Message at the port boundary
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Union

import mido

from midirouter.constants import (
    CHANNEL_MASK,
    CHANNEL_STATUS_FIRST,
    CHANNEL_STATUS_LAST,
    NOTE_OFF,
    NOTE_ON,
    TYPE_MASK,
)


def is_channel_status(status: Optional[int]) -> bool:
    """True if the status byte carries a channel nibble (0x80-0xEF)."""
    return status is not None and CHANNEL_STATUS_FIRST <= status <= CHANNEL_STATUS_LAST


def channel_of(status: Optional[int]) -> Optional[int]:
    """Zero-based channel of a channel status byte, None for system/empty."""
    if not is_channel_status(status):
        return None
    return status & CHANNEL_MASK


@dataclass(frozen=True)
class MidiMessage:
    data: bytes

    def __init__(self, data: Union[bytes, bytearray, Iterable[int]]):
        object.__setattr__(self, "data", bytes(data))

    @classmethod
    def from_mido(cls, msg: mido.Message) -> "MidiMessage":
        return cls(msg.bytes())

    def to_mido(self) -> mido.Message:
        return mido.Message.from_bytes(list(self.data))

    def __len__(self) -> int:
        return len(self.data)

    # ----- decoded views -----
    @property
    def status(self) -> Optional[int]:
        return self.data[0] if self.data else None

    @property
    def is_channel_message(self) -> bool:
        return is_channel_status(self.status)

    @property
    def channel(self) -> Optional[int]:
        return channel_of(self.status)

    def _is_kind(self, kind: int) -> bool:
        # key and velocity must both be present
        return self.is_channel_message and len(self.data) >= 3 and (self.status & TYPE_MASK) == kind

    @property
    def is_note_on(self) -> bool:
        """Note On by status nibble only; velocity 0 is still a Note On here."""
        return self._is_kind(NOTE_ON)

    @property
    def is_note_off(self) -> bool:
        return self._is_kind(NOTE_OFF)

    @property
    def is_note(self) -> bool:
        return self.is_note_on or self.is_note_off

    @property
    def note(self) -> Optional[int]:
        return self.data[1] if self.is_note else None

    @property
    def velocity(self) -> Optional[int]:
        return self.data[2] if self.is_note else None

    @property
    def type_name(self) -> str:
        """mido's name for this message type ('note_on', 'sysex', ...)."""
        if not self.data:
            return "unknown"
        try:
            return self.to_mido().type
        except ValueError:
            return "unknown"

    # ----- copies -----
    def replace_byte(self, index: int, value: int) -> "MidiMessage":
        """Return a copy with one byte replaced."""
        buf = bytearray(self.data)
        buf[index] = value & 0xFF
        return MidiMessage(buf)

    def __repr__(self) -> str:
        return f"MidiMessage({self.data.hex(' ')})"
