"""Shared fakes for routing tests (no MIDI hardware needed)."""
import pytest

from midirouter.config import RouterConfig
from midirouter.features.message import MidiMessage


class FakeTransport:
    """Collects everything sent to it."""

    def __init__(self):
        self.sent = []

    def send(self, msg):
        self.sent.append(msg)


class BrokenTransport:
    def __init__(self, error=None):
        self.error = error or IOError("port gone")
        self.calls = 0

    def send(self, msg):
        self.calls += 1
        raise self.error


class FakeMidoMsg:
    def __init__(self, type, note=0, velocity=0):
        self.type = type
        self.note = note
        self.velocity = velocity


class FakeInputPort:
    """Stands in for a mido input port; each iter_pending() call pops one batch."""

    def __init__(self, batches):
        self.batches = list(batches)

    def iter_pending(self):
        if not self.batches:
            return iter([])
        return iter(self.batches.pop(0))


def note_on(key, velocity=80, channel=0):
    return MidiMessage([0x90 | channel, key, velocity])


def note_off(key, velocity=0, channel=0):
    return MidiMessage([0x80 | channel, key, velocity])


def make_config(*routes, base="Router"):
    return RouterConfig(input_device="Keys", output_base=base, outputs=list(routes))


@pytest.fixture
def transports():
    return [FakeTransport(), FakeTransport(), FakeTransport()]
