"""Human-readable lines for routed and dropped messages."""
import sys
from typing import Optional, TextIO

from midirouter.features.message import MidiMessage
from midirouter.features.transforms import NO_CHANGE, Transformation

DIM = "\033[2m"
RESET = "\033[0m"


def _format_data(data: bytes) -> str:
    return "[" + " ".join(str(b) for b in data) + "]"


def format_channel(original: int, t: Transformation) -> str:
    if t.channel_changed:
        return f"channel: {t.channel_before}->{t.channel_after}"
    return f"channel: {original}"


def format_note(original: int, t: Transformation) -> str:
    if t.note_changed:
        return f"note: {t.note_before}->{t.note_after}"
    return f"note: {original}"


def format_message(msg: MidiMessage, transformation: Optional[Transformation] = None) -> str:
    """Describe `msg` (the message as received) with one output's rewrite applied on top.

    Pure: the result depends only on the two arguments.
    """
    t = transformation or NO_CHANGE
    type_name = msg.type_name

    if msg.is_channel_message:
        channel_str = format_channel(msg.channel + 1, t)
        if msg.is_note:
            note_str = format_note(msg.note, t)
            return f"{type_name} {channel_str}, {note_str}, velocity: {msg.velocity}"
        if len(msg) > 1:
            return f"{type_name} {channel_str}, data: {_format_data(msg.data[1:])}"
        return f"{type_name} {channel_str}"

    # system messages carry no channel
    if len(msg) > 1:
        return f"{type_name} data: {_format_data(msg.data[1:])}"
    return type_name


class Reporter:
    """Prints one line per routed output, or one line per dropped message."""

    def __init__(self, quiet: bool = False, stream: Optional[TextIO] = None):
        self.quiet = quiet
        self.stream = stream

    def _write(self, line: str):
        print(line, file=self.stream or sys.stdout, flush=True)

    def routed(self, output: str, msg: MidiMessage, transformation: Transformation):
        if self.quiet:
            return
        self._write(f"[{output}] {format_message(msg, transformation)}")

    def dropped(self, msg: MidiMessage):
        if self.quiet:
            return
        # same text as an unmodified forward, dimmed
        self._write(f"{DIM}[DROPPED] {format_message(msg, NO_CHANGE)}{RESET}")
