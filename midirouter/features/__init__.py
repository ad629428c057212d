"""Routing engine: message model, filters, transforms, dispatch and reporting."""
from .message import MidiMessage, channel_of
from .filters import ChannelFilter, NoteRangeFilter
from .transforms import Transformation, apply_channel_override, apply_note_transpose
from .router import OutputRoute, Router, RoutingOutcome, should_route
from .report import Reporter, format_message

__all__ = [
    'MidiMessage',
    'channel_of',
    'ChannelFilter',
    'NoteRangeFilter',
    'Transformation',
    'apply_channel_override',
    'apply_note_transpose',
    'OutputRoute',
    'Router',
    'RoutingOutcome',
    'should_route',
    'Reporter',
    'format_message',
]
