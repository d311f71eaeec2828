"""Transport layer: delivering frames to the relay board."""

from .serial_connection import SerialTransport, list_ports, send
