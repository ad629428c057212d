"""
MIDI port interface for midirouter.
Handles input discovery, the routed input port and the virtual outputs.
"""
import logging
import re
from typing import Callable, List, Optional, Sequence

import mido

from midirouter.features.message import MidiMessage

log = logging.getLogger(__name__)


class DeviceNotFound(LookupError):
    """The configured MIDI input is not connected."""


class PortError(RuntimeError):
    """A MIDI port could not be opened."""


def _dedupe(names: List[str]) -> List[str]:
    """Remove duplicate port names."""
    return list(dict.fromkeys(names))

def _is_virtual_through(name: str) -> bool:
    """Check if port is an ALSA virtual through port or RtMidi port."""
    patterns = [
        r'midi\s+through',      # "Midi Through Port-0"
        r'rtmidi',              # "RtMidiIn Client", "RtMidiOut Client"
    ]
    return any(re.search(pattern, name, re.IGNORECASE) for pattern in patterns)

def list_inputs() -> List[str]:
    """Get list of available input port names."""
    return [name for name in _dedupe(mido.get_input_names()) if not _is_virtual_through(name)]

def find_input(names: Sequence[str], target: Optional[str]) -> Optional[str]:
    """Find exact match in port names."""
    if not target:
        return None
    for n in names:
        if n == target:
            return n
    return None


class VirtualOutput:
    """A named virtual output port that accepts MidiMessage values."""

    def __init__(self, name: str):
        self.name = name
        self._port = None

    def open(self):
        try:
            self._port = mido.open_output(self.name, virtual=True)
        except Exception as e:
            raise PortError(f"failed to create virtual output {self.name}: {e}") from e
        log.info("Opened virtual output: %s", self.name)
        return self

    def send(self, msg: MidiMessage):
        if self._port is None:
            raise RuntimeError(f"output {self.name} is not open")
        self._port.send(msg.to_mido())

    def close(self):
        if self._port is None:
            return
        try:
            self._port.close()
            log.info("Closed virtual output: %s", self.name)
        except Exception as e:
            log.warning("Error closing %s: %s", self.name, e)
        self._port = None


class RouterPorts:
    """Owns the routed input port and one virtual output per configured route."""

    def __init__(self, config):
        self.config = config
        self.outputs: List[VirtualOutput] = [VirtualOutput(config.full_name(r)) for r in config.outputs]
        self._in_port = None

    def open_outputs(self) -> List[VirtualOutput]:
        for out in self.outputs:
            out.open()
        return self.outputs

    def open_input(self, callback: Callable[[mido.Message], None]):
        """Start delivering input messages to `callback` (called on the backend's thread)."""
        name = find_input(list_inputs(), self.config.input_device)
        if name is None:
            raise DeviceNotFound(f"configured input device not found: {self.config.input_device}")
        try:
            self._in_port = mido.open_input(name, callback=callback)
        except Exception as e:
            raise PortError(f"failed to open MIDI input {name}: {e}") from e
        log.info("Opened MIDI input: %s", name)

    def close_ports(self):
        """Close all MIDI ports."""
        if self._in_port:
            try:
                self._in_port.close()
                log.info("Closed MIDI input: %s", self.config.input_device)
            except Exception as e:
                log.warning("Error closing MIDI input: %s", e)
            self._in_port = None

        for out in self.outputs:
            out.close()
