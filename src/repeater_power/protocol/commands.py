"""Logical relay actions and their wire frames.

The board only knows "coil energized" and "coil released". Whether that
turns the load on or off depends on which contact it is wired to, so every
action is resolved against the channel's polarity.
"""

from __future__ import annotations

from enum import Enum

from ..models.relay import Polarity
from .framing import Frame, OFF_FRAME, ON_FRAME

CYCLE_SETTLE_SECONDS = 2.0


class Action(str, Enum):
    """Operator intents."""

    POWER_OFF = "off"
    POWER_ON = "on"
    POWER_CYCLE = "cycle"

    @property
    def label(self) -> str:
        return {
            Action.POWER_OFF: "Power Off",
            Action.POWER_ON: "Power On",
            Action.POWER_CYCLE: "Power Cycle",
        }[self]


# (action, polarity) -> frame
_FRAME_TABLE: dict[tuple[Action, Polarity], Frame] = {
    (Action.POWER_OFF, Polarity.NORMALLY_OPEN): ON_FRAME,
    (Action.POWER_ON, Polarity.NORMALLY_OPEN): OFF_FRAME,
    (Action.POWER_OFF, Polarity.NORMALLY_CLOSED): OFF_FRAME,
    (Action.POWER_ON, Polarity.NORMALLY_CLOSED): ON_FRAME,
}


def select_frame(action: Action, polarity: bool | Polarity) -> Frame:
    """Pick the frame that achieves ``action`` on a relay wired as ``polarity``.

    Args:
        action: ``POWER_ON`` or ``POWER_OFF``.
        polarity: A :class:`Polarity`, or the persisted mode flag
            (``True`` = normally-open).

    Raises:
        ValueError: For ``POWER_CYCLE``, which is two frames; use
            :func:`cycle_frames`.
    """
    if action is Action.POWER_CYCLE:
        raise ValueError("Power cycle has no single frame; use cycle_frames()")
    return _FRAME_TABLE[(Action(action), Polarity.from_mode(polarity))]


def cycle_frames(polarity: bool | Polarity) -> tuple[Frame, Frame]:
    """Return the (off, on) frames of a power cycle, in send order."""
    return (
        select_frame(Action.POWER_OFF, polarity),
        select_frame(Action.POWER_ON, polarity),
    )
