"""Route evaluation and the per-message dispatch loop.

Every configured output is checked against the message as received. Outputs
that accept it get their own rewritten copy (channel override, then note
transposition) which is sent to that output's transport. One report line is
printed per output that got the message, or a single dropped line if none did.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import mido

from midirouter.features.filters import ChannelFilter, NoteRangeFilter
from midirouter.features.message import MidiMessage
from midirouter.features.report import Reporter
from midirouter.features.transforms import (
    NO_CHANGE,
    Transformation,
    apply_channel_override,
    apply_note_transpose,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputRoute:
    """One virtual output. None disables a feature; a transpose of 0 is enabled but does nothing."""
    name: str
    channel_filter: Optional[ChannelFilter] = None
    note_range_filter: Optional[NoteRangeFilter] = None
    override_channel: Optional[int] = None
    transpose_semitones: Optional[int] = None

    def transform(self, msg: MidiMessage) -> Tuple[MidiMessage, Transformation]:
        """Apply channel override then transposition to `msg`."""
        out, t_channel = apply_channel_override(msg, self.override_channel)
        out, t_note = apply_note_transpose(out, self.transpose_semitones)
        return out, t_channel.merged(t_note)


def should_route(msg: MidiMessage, route: OutputRoute) -> bool:
    """All enabled filters must pass; no filters means everything passes."""
    if route.channel_filter is not None and not route.channel_filter.matches(msg):
        return False
    if route.note_range_filter is not None and not route.note_range_filter.matches(msg):
        return False
    return True


@dataclass(frozen=True)
class RoutingOutcome:
    output: str
    forwarded: bool
    sent: Optional[MidiMessage] = None
    transformation: Transformation = NO_CHANGE
    error: Optional[Exception] = None

    @property
    def channel_before(self) -> Optional[int]:
        return self.transformation.channel_before

    @property
    def channel_after(self) -> Optional[int]:
        return self.transformation.channel_after

    @property
    def note_before(self) -> Optional[int]:
        return self.transformation.note_before

    @property
    def note_after(self) -> Optional[int]:
        return self.transformation.note_after


class Router:
    """Fans each incoming message out to the configured outputs.

    `transports` line up with `config.outputs` and only need a `send(MidiMessage)`
    method. The route list is frozen at construction and handle() keeps no state
    between calls, so the input backend may call it from its own thread, one
    event at a time.
    """

    def __init__(self, config, transports: Sequence, reporter: Optional[Reporter] = None):
        self.routes: Tuple[OutputRoute, ...] = tuple(config.outputs)
        self.labels: Tuple[str, ...] = tuple(config.full_name(r) for r in self.routes)
        if len(transports) != len(self.routes):
            raise ValueError(f"Need {len(self.routes)} transports, got {len(transports)}")
        self.transports = tuple(transports)
        self.reporter = reporter or Reporter()

    def _route_one(self, msg: MidiMessage, route: OutputRoute, label: str, transport) -> RoutingOutcome:
        if not should_route(msg, route):
            return RoutingOutcome(output=label, forwarded=False)

        out, transformation = route.transform(msg)
        try:
            transport.send(out)
        except Exception as e:
            log.error("Error sending to %s: %s", label, e)
            return RoutingOutcome(output=label, forwarded=False, transformation=transformation, error=e)
        return RoutingOutcome(output=label, forwarded=True, sent=out, transformation=transformation)

    def handle(self, msg: MidiMessage, timestamp: Optional[float] = None) -> List[RoutingOutcome]:
        """Route one message to every output, in configuration order."""
        outcomes = [
            self._route_one(msg, route, label, transport)
            for route, label, transport in zip(self.routes, self.labels, self.transports)
        ]

        forwarded = [o for o in outcomes if o.forwarded]
        if not forwarded:
            self.reporter.dropped(msg)
        for outcome in forwarded:
            self.reporter.routed(outcome.output, msg, outcome.transformation)
        return outcomes

    def on_mido_message(self, msg: mido.Message):
        """Input port callback."""
        self.handle(MidiMessage.from_mido(msg), getattr(msg, "time", None))
