"""Tests for the per-call serial transport."""

import logging
from unittest.mock import MagicMock

import pytest
import serial

from repeater_power.errors import OpenFailedError, TransportError, WriteFailedError
from repeater_power.protocol.framing import OFF_FRAME, ON_FRAME
from repeater_power.transport import serial_connection
from repeater_power.transport.serial_connection import (
    BAUD_RATE,
    READ_TIMEOUT_S,
    SerialTransport,
    list_ports,
)


def _transport_with_port():
    port = MagicMock()
    factory = MagicMock(return_value=port)
    return SerialTransport(serial_factory=factory), factory, port


def test_send_opens_with_line_settings():
    transport, factory, _ = _transport_with_port()
    transport.send("COM2", ON_FRAME)

    factory.assert_called_once_with(
        port="COM2",
        baudrate=9600,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        timeout=1.0,
    )
    assert BAUD_RATE == 9600
    assert READ_TIMEOUT_S == 1.0


def test_send_writes_frame_once_then_flushes_and_closes():
    transport, _, port = _transport_with_port()
    transport.send("COM2", OFF_FRAME)

    port.write.assert_called_once_with(bytes([0xA0, 0x01, 0x00, 0xA1]))
    port.flush.assert_called_once()
    port.close.assert_called_once()


def test_send_accepts_raw_bytes():
    transport, _, port = _transport_with_port()
    transport.send("COM3", b"\xA0\x01\x01\xA2")
    port.write.assert_called_once_with(b"\xA0\x01\x01\xA2")


def test_no_such_port_fails_to_open():
    """A real open of a bogus device name reports OpenFailedError."""
    with pytest.raises(OpenFailedError) as excinfo:
        SerialTransport().send("NO_SUCH_PORT", ON_FRAME)
    assert excinfo.value.port_name == "NO_SUCH_PORT"


def test_open_failure_writes_nothing():
    factory = MagicMock(side_effect=serial.SerialException("could not open port"))
    transport = SerialTransport(serial_factory=factory)

    with pytest.raises(OpenFailedError):
        transport.send("COM9", ON_FRAME)
    factory.assert_called_once()


def test_write_failure_still_releases_port():
    transport, _, port = _transport_with_port()
    port.write.side_effect = serial.SerialTimeoutException("write timeout")

    with pytest.raises(WriteFailedError) as excinfo:
        transport.send("COM2", ON_FRAME)

    assert isinstance(excinfo.value, TransportError)
    port.flush.assert_called_once()
    port.close.assert_called_once()


def test_flush_failure_does_not_leak_port():
    transport, _, port = _transport_with_port()
    port.flush.side_effect = OSError("device gone")

    transport.send("COM2", ON_FRAME)
    port.close.assert_called_once()


def test_flush_termios_error_is_contained():
    """A tcdrain failure from an unplugged adapter does not escape send."""
    termios = pytest.importorskip("termios")
    transport, _, port = _transport_with_port()
    port.flush.side_effect = termios.error(5, "Input/output error")

    transport.send("COM2", ON_FRAME)
    port.write.assert_called_once()
    port.close.assert_called_once()


def test_close_error_does_not_mask_write_failure():
    transport, _, port = _transport_with_port()
    port.write.side_effect = serial.SerialException("device reports readiness to read but returned no data")
    port.close.side_effect = OSError(5, "Input/output error")

    with pytest.raises(WriteFailedError):
        transport.send("COM2", ON_FRAME)
    port.flush.assert_called_once()


def test_close_error_after_good_write_is_contained():
    transport, _, port = _transport_with_port()
    port.close.side_effect = OSError(5, "Input/output error")

    transport.send("COM2", OFF_FRAME)
    port.write.assert_called_once_with(bytes(OFF_FRAME))


def test_list_ports(monkeypatch):
    fake = [MagicMock(device="/dev/ttyUSB1"), MagicMock(device="/dev/ttyUSB0")]
    monkeypatch.setattr(serial_connection._list_ports, "comports", lambda: fake)
    assert list_ports() == ["/dev/ttyUSB0", "/dev/ttyUSB1"]


def test_delivery_failures_not_logged_as_warnings(caplog):
    """The caller reports delivery failures, so the transport logs them below WARNING."""
    factory = MagicMock(side_effect=serial.SerialException("could not open port"))
    caplog.set_level(logging.DEBUG, logger="repeater_power.transport.serial_connection")

    with pytest.raises(OpenFailedError):
        SerialTransport(serial_factory=factory).send("COM9", ON_FRAME)

    transport, _, port = _transport_with_port()
    port.write.side_effect = serial.SerialException("write failed")
    with pytest.raises(WriteFailedError):
        transport.send("COM2", ON_FRAME)

    assert caplog.records
    assert all(r.levelno < logging.WARNING for r in caplog.records)
