"""Protocol layer: relay command frames and action-to-frame selection."""

from .framing import Frame, OFF_FRAME, ON_FRAME, build_frame, parse_hex
from .commands import Action, select_frame, cycle_frames
