"""Interactive terminal configuration.

Prompts go through `ask`/`say` (input/print by default) so the flow can be
scripted. A bad answer aborts with ConfigError; there is no retry loop.
"""
from typing import Callable, Optional, Sequence

from midirouter.config import ConfigError, RouterConfig
from midirouter.constants import (
    CHANNEL_MAX, CHANNEL_MIN, DEFAULT_OUTPUT_BASE, MAX_OUTPUTS,
    TRANSPOSE_MAX, TRANSPOSE_MIN,
)
from midirouter.features.filters import ChannelFilter, NoteRangeFilter
from midirouter.features.router import OutputRoute
from midirouter.ui.utils import is_yes

Ask = Callable[[str], str]
Say = Callable[[str], None]
# capture(input_device) -> NoteRangeFilter or None
Capture = Callable[[str], Optional[NoteRangeFilter]]


def _ask_int(ask: Ask, prompt: str, lo: int, hi: int, error: str) -> int:
    raw = ask(prompt).strip()
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(error) from None
    if not (lo <= value <= hi):
        raise ConfigError(error)
    return value


def select_input_device(inputs: Sequence[str], ask: Ask = input, say: Say = print) -> str:
    """Numbered menu of input devices; returns the chosen name."""
    if not inputs:
        raise ConfigError("no MIDI input devices found")

    say("Select MIDI Input Device:")
    for i, name in enumerate(inputs, start=1):
        say(f"  {i}: {name}")

    choice = _ask_int(ask, f"Select input device (1-{len(inputs)}): ", 1, len(inputs), "invalid selection")
    return inputs[choice - 1]


def configure_output(index: int, input_device: str, capture: Capture, ask: Ask, say: Say) -> OutputRoute:
    default_name = f"Out {index}"
    say(f"Configuring output {index}...")
    name = ask(f"Enter output name: (default: '{default_name}'): ").strip() or default_name

    channel_filter = None
    if is_yes(ask("Enable channel filter? (y/N): ")):
        channel = _ask_int(ask, "Channel number (1-16): ", CHANNEL_MIN, CHANNEL_MAX,
                           "invalid channel number (must be 1-16)")
        channel_filter = ChannelFilter(channel)

    note_range_filter = None
    if is_yes(ask("Enable note range filter? (y/N): ")):
        note_range_filter = capture(input_device)

    override_channel = None
    if is_yes(ask("Enable channel override? (y/N): ")):
        override_channel = _ask_int(ask, "Override channel (1-16): ", CHANNEL_MIN, CHANNEL_MAX,
                                    "invalid override channel number (must be 1-16)")

    transpose = None
    if is_yes(ask("Enable note transposition? (y/N): ")):
        transpose = _ask_int(ask, "Transpose semitones (-127 to +127): ", TRANSPOSE_MIN, TRANSPOSE_MAX,
                             "invalid transpose semitones (must be -127 to 127)")

    return OutputRoute(
        name=name,
        channel_filter=channel_filter,
        note_range_filter=note_range_filter,
        override_channel=override_channel,
        transpose_semitones=transpose,
    )


def interactive_config(inputs: Sequence[str], capture: Capture, ask: Ask = input, say: Say = print) -> RouterConfig:
    """Walk the user through input selection and every output's options."""
    say("Starting interactive configuration...")
    config = RouterConfig(input_device=select_input_device(inputs, ask, say))

    base = ask(f"Enter base name for outputs (default: '{DEFAULT_OUTPUT_BASE}'): ").strip()
    config.output_base = base or DEFAULT_OUTPUT_BASE

    count = _ask_int(ask, "Number of virtual outputs to create: ", 1, MAX_OUTPUTS,
                     f"invalid number of outputs (must be 1-{MAX_OUTPUTS})")
    for i in range(1, count + 1):
        config.outputs.append(configure_output(i, config.input_device, capture, ask, say))

    return config.validate()
