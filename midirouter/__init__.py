"""midirouter: fan one MIDI input out to filtered, rewritten virtual outputs."""

__version__ = "0.1.0"
