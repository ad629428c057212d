"""
central routing & app constants for midirouter
edit here if ranges/defaults change
"""
from pathlib import Path

# default file the interactive mode saves to (relative to the working dir)
DEFAULT_CONFIG_PATH = Path("config.json")


#------------------------//
# ROUTER DEFAULTS
#----------------------//

DEFAULT_OUTPUT_BASE = "MIDI Router"
MAX_OUTPUTS         = 16


#------------------------//
# MIDI RANGES
#----------------------//

CHANNEL_MIN   = 1               # one-based, as shown to the user
CHANNEL_MAX   = 16
NOTE_MIN      = 0
NOTE_MAX      = 127
TRANSPOSE_MIN = -127
TRANSPOSE_MAX = 127


#------------------------//
# STATUS BYTES
#----------------------//

CHANNEL_STATUS_FIRST = 0x80     # note off, ch 1
CHANNEL_STATUS_LAST  = 0xEF     # pitch bend, ch 16
NOTE_OFF  = 0x80
NOTE_ON   = 0x90
TYPE_MASK    = 0xF0
CHANNEL_MASK = 0x0F


#------------------------//
# NOTE CAPTURE
#----------------------//

CAPTURE_TIMEOUT_S = 30.0
CAPTURE_POLL_S    = 0.01
