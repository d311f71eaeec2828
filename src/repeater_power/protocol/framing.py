"""Command frame builder and parser for the serial relay board.

Frame layout::

    +--------+---------+-------+----------+
    | Header | Address | State | Checksum |
    | 0xA0   | 0x01    | 1 B   | 1 B      |
    +--------+---------+-------+----------+

- State: 0x00 releases the relay coil, 0x01 energizes it
- Checksum: 8-bit sum of header, address and state

The board never answers, so there is no response format.
"""

from __future__ import annotations

import string
from dataclasses import dataclass

from ..errors import FrameError, HexParseError
from ..utils.checksum import sum8

HEADER = 0xA0
ADDRESS = 0x01
FRAME_SIZE = 4

STATE_OFF = 0x00
STATE_ON = 0x01


@dataclass(frozen=True)
class Frame:
    """A single 4-byte relay command."""

    state: int

    def __post_init__(self) -> None:
        if self.state not in (STATE_OFF, STATE_ON):
            raise FrameError(f"Relay state must be 0 or 1, got {self.state}")

    @property
    def checksum(self) -> int:
        return sum8(bytes([HEADER, ADDRESS, self.state]))

    def to_bytes(self) -> bytes:
        return bytes([HEADER, ADDRESS, self.state, self.checksum])

    def hex(self) -> str:
        """Render as upper-case spaced hex, e.g. ``A0 01 01 A2``."""
        return self.to_bytes().hex(" ").upper()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        return f"Frame({self.hex()})"

    @classmethod
    def from_bytes(cls, data: bytes) -> Frame:
        """Decode and validate a 4-byte frame.

        Raises:
            FrameError: On wrong length, header, address or checksum.
        """
        if len(data) != FRAME_SIZE:
            raise FrameError(f"Frame must be {FRAME_SIZE} bytes, got {len(data)}")
        if data[0] != HEADER or data[1] != ADDRESS:
            raise FrameError(f"Bad frame header: {data[:2].hex(' ').upper()}")
        frame = cls(state=data[2])
        if data[3] != frame.checksum:
            raise FrameError(
                f"Bad checksum 0x{data[3]:02X}, expected 0x{frame.checksum:02X}"
            )
        return frame


def build_frame(state: int) -> Frame:
    """Build the frame that drives the relay coil to ``state`` (0 or 1)."""
    return Frame(state=state)


OFF_FRAME = build_frame(STATE_OFF)  # A0 01 00 A1
ON_FRAME = build_frame(STATE_ON)    # A0 01 01 A2


def parse_hex(text: str) -> bytes:
    """Convert a spaced hex string such as ``"A0 01 01 A2"`` to bytes.

    Raises:
        HexParseError: If the digits do not pair up or are not hex.
    """
    digits = text.replace(" ", "")
    if len(digits) % 2:
        raise HexParseError(f"Odd number of hex digits in {text!r}")
    bad = [c for c in digits if c not in string.hexdigits]
    if bad:
        raise HexParseError(f"Non-hex character {bad[0]!r} in {text!r}")
    return bytes(int(digits[i : i + 2], 16) for i in range(0, len(digits), 2))


def parse_frame(text: str) -> Frame:
    """Parse a hex string straight into a validated :class:`Frame`."""
    return Frame.from_bytes(parse_hex(text))
