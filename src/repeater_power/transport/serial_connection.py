"""Serial connection to the relay board.

Each send owns the port for its whole lifetime: open, write, flush,
close. Nothing is kept open between sends, so the AC and DC boards (or a
second program) can use their ports freely in between.
"""

from __future__ import annotations

import logging
from typing import Callable

import serial
from serial.tools import list_ports as _list_ports

from ..errors import OpenFailedError, WriteFailedError
from ..protocol.framing import Frame

logger = logging.getLogger(__name__)

BAUD_RATE = 9600
READ_TIMEOUT_S = 1.0


class SerialTransport:
    """Fire-and-forget frame delivery over a named serial device.

    Usage::

        transport = SerialTransport()
        transport.send("COM2", ON_FRAME)
    """

    def __init__(
        self,
        baud_rate: int = BAUD_RATE,
        timeout: float = READ_TIMEOUT_S,
        serial_factory: Callable[..., serial.Serial] = serial.Serial,
    ) -> None:
        self._baud_rate = baud_rate
        self._timeout = timeout
        self._serial_factory = serial_factory

    def _open(self, port_name: str) -> serial.Serial:
        try:
            return self._serial_factory(
                port=port_name,
                baudrate=self._baud_rate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._timeout,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            logger.info("Could not open %s: %s", port_name, e)
            raise OpenFailedError(port_name, f"could not open port: {e}") from e

    @staticmethod
    def _release(port: serial.Serial, port_name: str) -> None:
        """Flush then close, even after a failed write."""
        try:
            port.flush()
        except Exception as e:
            logger.warning("Flush failed on %s: %s", port_name, e)
        try:
            port.close()
        except Exception as e:
            logger.warning("Error closing %s: %s", port_name, e)

    def send(self, port_name: str, frame: Frame | bytes) -> None:
        """Write one frame to ``port_name`` in a single write call.

        Success only means the bytes reached the OS serial layer; the
        board sends no acknowledgement.

        Raises:
            OpenFailedError: If the device is absent, busy, or misnamed.
            WriteFailedError: If the write fails.
        """
        data = bytes(frame)
        port = self._open(port_name)
        try:
            logger.debug("Sending %s to %s", data.hex(" ").upper(), port_name)
            port.write(data)
        except (serial.SerialException, OSError) as e:
            logger.info("Write to %s failed: %s", port_name, e)
            raise WriteFailedError(port_name, f"write failed: {e}") from e
        finally:
            self._release(port, port_name)


_default_transport = SerialTransport()


def send(port_name: str, frame: Frame | bytes) -> None:
    """Send ``frame`` with the default 9600-baud transport."""
    _default_transport.send(port_name, frame)


def list_ports() -> list[str]:
    """Device names of the serial ports the OS currently reports."""
    return sorted(p.device for p in _list_ports.comports())
