# app.py
import argparse
import logging
import signal
import sys
import threading

import mido

from midirouter.config import ConfigError, RouterConfig, load_config_with_fallback, save_config
from midirouter.constants import DEFAULT_CONFIG_PATH
from midirouter.features.note_capture import CaptureTimeout, capture_note_range
from midirouter.features.report import Reporter
from midirouter.features.router import Router
from midirouter.hw.midi_io import DeviceNotFound, PortError, RouterPorts, list_inputs
from midirouter.ui.wizard import interactive_config, select_input_device

log = logging.getLogger("midirouter")


def _init_logging(verbose: bool = False):
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _capture_from_device(input_device: str):
    """Open the chosen input just long enough to capture a note range."""
    try:
        port = mido.open_input(input_device)
    except Exception as e:
        raise PortError(f"failed to open MIDI input {input_device}: {e}") from e
    with port:
        try:
            return capture_note_range(port)
        except CaptureTimeout as e:
            raise ConfigError(f"failed to configure note range: {e}") from e


def _parse_args(argv=None):
    ap = argparse.ArgumentParser(prog="midirouter",
                                 description="Route one MIDI input to filtered virtual outputs.")
    ap.add_argument("--save-config", metavar="FILE", default="",
                    help="Save result of configuration to FILE and exit (does not run router)")
    ap.add_argument("--config", metavar="FILE", default="",
                    help="Load configuration from FILE and start router")
    ap.add_argument("--quiet", action="store_true",
                    help="Suppress MIDI message logging during operation")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    return ap.parse_args(argv)


def run_router(config: RouterConfig, quiet: bool = False, stop_event: threading.Event = None):
    """Open ports, route until SIGINT/SIGTERM (or `stop_event`), then close everything."""
    stop_event = stop_event or threading.Event()

    def _on_signal(signum, frame):
        stop_event.set()
    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    ports = RouterPorts(config)
    try:
        router = Router(config, ports.open_outputs(), Reporter(quiet=quiet))

        print(f"Running with configuration:\n{config.to_json()}")
        print("Press Ctrl+C to stop...")

        ports.open_input(router.on_mido_message)

        stop_event.wait()
        print("Shutting down...")
    finally:
        ports.close_ports()


def main(argv=None) -> int:
    args = _parse_args(argv)
    _init_logging(args.verbose)

    try:
        if args.config:
            # config file mode: load existing config and run router
            config = load_config_with_fallback(args.config, list_inputs(), select_input_device)
        else:
            config = interactive_config(list_inputs(), _capture_from_device)

            if args.save_config:
                save_config(config, args.save_config)
                print(f"Configuration saved to {args.save_config}")
                return 0

            # normal interactive mode: save to default location
            try:
                save_config(config, DEFAULT_CONFIG_PATH)
            except OSError as e:
                log.warning("Failed to save config: %s", e)

        run_router(config, quiet=args.quiet)
    except (ConfigError, DeviceNotFound, PortError) as e:
        log.error("%s", e)
        return 1
    except (EOFError, KeyboardInterrupt):
        print()
        log.error("configuration aborted")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
