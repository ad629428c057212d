"""Note capture for setting up note-range filters.
Listens on an input port for the next Note On and returns its key.
"""
import time
from typing import Callable, Optional

from midirouter.constants import CAPTURE_POLL_S, CAPTURE_TIMEOUT_S
from midirouter.features.filters import NoteRangeFilter
from midirouter.ui.utils import note_to_name


class CaptureTimeout(TimeoutError):
    """No note was played before the capture deadline."""


def capture_note(port, timeout: float = CAPTURE_TIMEOUT_S, poll_interval: float = CAPTURE_POLL_S,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep) -> int:
    """
    Wait for a note_on with velocity > 0 on `port` (anything with iter_pending()).

    Messages already queued when the capture starts are discarded.
    Raises CaptureTimeout after `timeout` seconds.
    """
    list(port.iter_pending())

    deadline = clock() + timeout
    while clock() < deadline:
        for msg in port.iter_pending():
            if msg.type == 'note_on' and msg.velocity > 0:
                return msg.note
        sleep(poll_interval)

    raise CaptureTimeout(f"timeout: no note captured within {timeout:g} seconds")


def capture_note_range(port, ask: Callable[[str], str] = input, say: Callable[[str], None] = print,
                       timeout: float = CAPTURE_TIMEOUT_S, **capture_kw) -> Optional[NoteRangeFilter]:
    """Capture lowest and highest note, confirm with the user.

    Returns None if the user rejects the range.
    """
    say("  Play the LOWEST note: ")
    low = capture_note(port, timeout=timeout, **capture_kw)
    say(f"  {note_to_name(low)}")

    say("  Play the HIGHEST note: ")
    high = capture_note(port, timeout=timeout, **capture_kw)
    say(f"  {note_to_name(high)}")

    note_range = NoteRangeFilter.between(low, high)
    answer = ask(f"Confirm range {note_to_name(note_range.min_note)} to "
                 f"{note_to_name(note_range.max_note)}? (Y/n): ")
    if answer.strip().lower() == "n":
        return None
    return note_range
