# config.py
from __future__ import annotations
import json, logging, os, tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from midirouter.constants import (
    CHANNEL_MAX, CHANNEL_MIN, DEFAULT_OUTPUT_BASE,
    NOTE_MAX, NOTE_MIN, TRANSPOSE_MAX, TRANSPOSE_MIN,
)
from midirouter.features.filters import ChannelFilter, NoteRangeFilter
from midirouter.features.router import OutputRoute

log = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Configuration could not be read, parsed or validated."""


def _opt_int(raw: Any, what: str) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigError(f"{what} must be an integer, got {raw!r}")
    return raw


def _req_int(raw: Any, what: str) -> int:
    if raw is None:
        raise ConfigError(f"{what} is required")
    return _opt_int(raw, what)


def _route_from_dict(d: Any, idx: int) -> OutputRoute:
    if not isinstance(d, dict):
        raise ConfigError(f"output {idx} must be an object")
    cf = d.get("channel_filter")
    nrf = d.get("note_range_filter")
    try:
        return OutputRoute(
            name=str(d.get("name") or ""),
            channel_filter=ChannelFilter(_req_int(cf["channel"], "channel")) if cf is not None else None,
            note_range_filter=NoteRangeFilter(
                _req_int(nrf["min_note"], "min_note"),
                _req_int(nrf["max_note"], "max_note"),
            ) if nrf is not None else None,
            override_channel=_opt_int(d.get("override_channel"), "override_channel"),
            transpose_semitones=_opt_int(d.get("transpose_semitones"), "transpose_semitones"),
        )
    except (KeyError, TypeError) as e:
        raise ConfigError(f"output {idx} is malformed: {e}") from e


def _route_to_dict(r: OutputRoute) -> Dict[str, Any]:
    return {
        "name": r.name,
        "channel_filter": {"channel": r.channel_filter.channel} if r.channel_filter else None,
        "note_range_filter": {
            "min_note": r.note_range_filter.min_note,
            "max_note": r.note_range_filter.max_note,
        } if r.note_range_filter else None,
        "override_channel": r.override_channel,
        "transpose_semitones": r.transpose_semitones,
    }


@dataclass
class RouterConfig:
    input_device: str = ""
    output_base: str = DEFAULT_OUTPUT_BASE
    outputs: List[OutputRoute] = field(default_factory=list)

    def full_name(self, route: OutputRoute) -> str:
        """Virtual port name for an output."""
        return f"{self.output_base} {route.name}"

    def validate(self) -> "RouterConfig":
        if not self.outputs:
            raise ConfigError("no outputs configured")

        for i, out in enumerate(self.outputs, start=1):
            if not out.name:
                raise ConfigError(f"output {i} has no name")
            if out.channel_filter is not None and not (CHANNEL_MIN <= out.channel_filter.channel <= CHANNEL_MAX):
                raise ConfigError(f"output {i} has invalid channel: {out.channel_filter.channel} (must be 1-16)")
            nrf = out.note_range_filter
            if nrf is not None and (
                nrf.min_note > nrf.max_note
                or not (NOTE_MIN <= nrf.min_note <= NOTE_MAX)
                or not (NOTE_MIN <= nrf.max_note <= NOTE_MAX)
            ):
                raise ConfigError(f"output {i} has invalid note range: {nrf.min_note}-{nrf.max_note}")
            if out.override_channel is not None and not (CHANNEL_MIN <= out.override_channel <= CHANNEL_MAX):
                raise ConfigError(f"output {i} has invalid override channel: {out.override_channel} (must be 1-16)")
            if out.transpose_semitones is not None and not (TRANSPOSE_MIN <= out.transpose_semitones <= TRANSPOSE_MAX):
                raise ConfigError(
                    f"output {i} has invalid transpose semitones: {out.transpose_semitones} (must be -127 to 127)"
                )
        return self

    # ----- serialization -----
    @classmethod
    def from_dict(cls, d: Any) -> "RouterConfig":
        if not isinstance(d, dict):
            raise ConfigError("configuration must be a JSON object")
        outputs = d.get("outputs") or []
        if not isinstance(outputs, list):
            raise ConfigError("outputs must be a list")
        base = d.get("output_base")
        return cls(
            input_device=str(d.get("input_device") or ""),
            output_base=DEFAULT_OUTPUT_BASE if base is None else str(base),
            outputs=[_route_from_dict(o, i) for i, o in enumerate(outputs, start=1)],
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "input_device": self.input_device,
            "output_base": self.output_base,
            "outputs": [_route_to_dict(r) for r in self.outputs],
        }

    def to_json(self) -> str:
        return json.dumps(self.as_dict(), indent=2)


def load_config(path: Path | str) -> RouterConfig:
    path = Path(path)
    try:
        on_disk = json.loads(path.read_text())
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse config file: {e}") from e
    return RouterConfig.from_dict(on_disk)


def save_config(config: RouterConfig, path: Path | str | None) -> None:
    """Write the config as JSON; with no path, print it to stdout instead."""
    data = config.to_json()
    if not path:
        print(data)
        return

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # atomic write
    dirpath = str(path.parent)
    with tempfile.NamedTemporaryFile("w", dir=dirpath, delete=False) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = Path(tmp.name)
    tmp_path.replace(path)


def load_config_with_fallback(
    path: Path | str,
    inputs: Sequence[str],
    select: Callable[[Sequence[str]], str],
) -> RouterConfig:
    """Load and validate; if the saved input device is gone, ask `select` for another one."""
    config = load_config(path).validate()
    if config.input_device not in inputs:
        log.warning("configured input device not found: %s (available: %s)",
                    config.input_device, ", ".join(inputs) or "none")
        config.input_device = select(inputs)
    return config
