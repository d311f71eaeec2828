"""Exception hierarchy for the repeater power controller."""

from __future__ import annotations


class RepeaterPowerError(Exception):
    """Base class for all errors raised by this package."""


# ─── PROTOCOL ────────────────────────────────────────────────────────

class ProtocolError(RepeaterPowerError):
    """A relay command frame could not be built or decoded."""


class FrameError(ProtocolError):
    """Bytes do not form a valid 4-byte relay command frame."""


class HexParseError(ProtocolError, ValueError):
    """A hex command string has odd length or non-hex characters."""


# ─── TRANSPORT ───────────────────────────────────────────────────────

class TransportError(RepeaterPowerError):
    """A frame could not be delivered to a serial device."""

    def __init__(self, port_name: str, message: str) -> None:
        super().__init__(f"{port_name}: {message}")
        self.port_name = port_name
        self.message = message


class OpenFailedError(TransportError):
    """The serial device is absent, busy, or misnamed."""


class WriteFailedError(TransportError):
    """The serial device opened but the write itself failed."""


# ─── CONFIGURATION ───────────────────────────────────────────────────

class ConfigError(RepeaterPowerError):
    """Configuration could not be read or written."""


class ConfigLoadError(ConfigError):
    """The configuration file is missing or corrupt."""


class ConfigSaveError(ConfigError):
    """The configuration file could not be written."""
