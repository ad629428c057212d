"""Tests for route evaluation and dispatch."""
import io

import mido
import pytest
from conftest import BrokenTransport, FakeTransport, make_config, note_on

from midirouter.features.filters import ChannelFilter, NoteRangeFilter
from midirouter.features.message import MidiMessage
from midirouter.features.report import Reporter
from midirouter.features.router import OutputRoute, Router, should_route


def _router(config, transports):
    out = io.StringIO()
    return Router(config, transports, Reporter(stream=out)), out


class TestShouldRoute:

    def test_no_filters_passes_everything(self):
        route = OutputRoute("all")
        for data in ([0x90, 60, 80], [0xB5, 1, 1], [0xF8], [0xF0, 1, 0xF7]):
            assert should_route(MidiMessage(data), route)

    def test_filters_are_anded(self):
        route = OutputRoute("bass", channel_filter=ChannelFilter(2), note_range_filter=NoteRangeFilter(36, 59))
        assert should_route(note_on(40, channel=1), route)
        assert not should_route(note_on(40, channel=0), route)
        assert not should_route(note_on(60, channel=1), route)
        # control change on the right channel ignores the note range
        assert should_route(MidiMessage([0xB1, 7, 100]), route)


class TestOutputRoute:

    def test_zero_transpose_differs_from_disabled(self):
        assert OutputRoute("a", transpose_semitones=0) != OutputRoute("a")

    def test_override_then_transpose(self):
        route = OutputRoute("x", override_channel=3, transpose_semitones=12)
        out, t = route.transform(note_on(60, channel=0))
        assert out.data == bytes([0x92, 72, 80])
        assert (t.channel_before, t.channel_after, t.note_before, t.note_after) == (1, 3, 60, 72)

    def test_deterministic(self):
        route = OutputRoute("x", override_channel=9, transpose_semitones=-5)
        msg = note_on(64, channel=4)
        assert route.transform(msg) == route.transform(msg)


class TestRouter:

    def test_unfiltered_output_forwards_unchanged(self):
        t = FakeTransport()
        router, _ = _router(make_config(OutputRoute("all")), [t])
        for data in ([0x90, 60, 80], [0xB5, 1, 1], [0xF8], [0xF0, 1, 2, 0xF7]):
            router.handle(MidiMessage(data))
        assert [m.data for m in t.sent] == [
            bytes([0x90, 60, 80]), bytes([0xB5, 1, 1]), bytes([0xF8]), bytes([0xF0, 1, 2, 0xF7]),
        ]

    def test_channel_filter_and_override_scenario(self):
        t = FakeTransport()
        config = make_config(OutputRoute("Lead", channel_filter=ChannelFilter(1), override_channel=5))
        router, out = _router(config, [t])

        outcomes = router.handle(note_on(60, 80, channel=0))

        assert t.sent == [MidiMessage([0x94, 60, 80])]
        assert outcomes[0].forwarded
        assert (outcomes[0].channel_before, outcomes[0].channel_after) == (1, 5)
        assert outcomes[0].note_before is None
        assert out.getvalue() == "[Router Lead] note_on channel: 1->5, note: 60, velocity: 80\n"

    def test_note_range_drop_scenario(self):
        t = FakeTransport()
        router, out = _router(make_config(OutputRoute("Bass", note_range_filter=NoteRangeFilter(36, 59))), [t])

        outcomes = router.handle(note_on(60, 80))

        assert t.sent == []
        assert not outcomes[0].forwarded
        assert outcomes[0].transformation.is_empty
        assert out.getvalue().count("[DROPPED]") == 1
        assert "note: 60" in out.getvalue()

    def test_transpose_scenario(self):
        t = FakeTransport()
        router, out = _router(make_config(OutputRoute("Low", transpose_semitones=-12)), [t])
        router.handle(note_on(48, 80))
        assert t.sent[0].note == 36
        assert "note: 48->36" in out.getvalue()

    def test_outputs_transform_independently(self, transports):
        a, b, c = transports
        config = make_config(
            OutputRoute("A", override_channel=2),
            OutputRoute("B", override_channel=10, transpose_semitones=1),
            OutputRoute("C"),
        )
        router, out = _router(config, [a, b, c])
        msg = note_on(60, 80, channel=0)

        router.handle(msg)

        assert a.sent == [MidiMessage([0x91, 60, 80])]
        assert b.sent == [MidiMessage([0x99, 61, 80])]
        assert c.sent == [msg]
        assert out.getvalue().splitlines() == [
            "[Router A] note_on channel: 1->2, note: 60, velocity: 80",
            "[Router B] note_on channel: 1->10, note: 60->61, velocity: 80",
            "[Router C] note_on channel: 1, note: 60, velocity: 80",
        ]

    def test_filters_see_original_message(self):
        # first output moves everything to channel 2; second only takes channel 1
        a, b = FakeTransport(), FakeTransport()
        config = make_config(
            OutputRoute("A", override_channel=2),
            OutputRoute("B", channel_filter=ChannelFilter(1)),
        )
        router, _ = _router(config, [a, b])
        router.handle(note_on(60, channel=0))
        assert len(b.sent) == 1

    def test_send_failure_does_not_stop_other_outputs(self, caplog):
        broken, healthy = BrokenTransport(), FakeTransport()
        config = make_config(OutputRoute("Bad"), OutputRoute("Good"))
        router, out = _router(config, [broken, healthy])

        outcomes = router.handle(note_on(60))
        router.handle(note_on(61))

        assert broken.calls == 2
        assert [m.note for m in healthy.sent] == [60, 61]
        assert not outcomes[0].forwarded
        assert isinstance(outcomes[0].error, IOError)
        assert outcomes[1].forwarded
        assert "Error sending to Router Bad" in caplog.text
        assert "[Router Bad]" not in out.getvalue()
        assert "[DROPPED]" not in out.getvalue()

    def test_all_sends_failing_reports_drop(self):
        router, out = _router(make_config(OutputRoute("Bad")), [BrokenTransport()])
        router.handle(note_on(60))
        assert out.getvalue().startswith("\033[2m[DROPPED]")

    def test_order_is_preserved_per_output(self):
        t = FakeTransport()
        router, _ = _router(make_config(OutputRoute("x", transpose_semitones=2)), [t])
        for key in (60, 62, 64, 65):
            router.handle(note_on(key))
        assert [m.note for m in t.sent] == [62, 64, 66, 67]

    def test_mido_callback(self):
        t = FakeTransport()
        router, _ = _router(make_config(OutputRoute("x")), [t])
        router.on_mido_message(mido.Message("control_change", channel=3, control=7, value=90))
        assert t.sent == [MidiMessage([0xB3, 7, 90])]

    def test_transport_count_must_match(self):
        with pytest.raises(ValueError, match="Need 2 transports"):
            Router(make_config(OutputRoute("a"), OutputRoute("b")), [FakeTransport()])
