"""Persisted relay configuration (``config.json``).

File layout (keys kept from the original Go tool so existing files load)::

    {"ACPortName": "COM2", "DCPortName": "COM3", "ACMode": true, "DCMode": true}

``*Mode`` is ``true`` for normally-open wiring.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

from ..errors import ConfigLoadError, ConfigSaveError
from .relay import Channel, Polarity

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "REPEATER_POWER_CONFIG"
DEFAULT_CONFIG_FILE = "config.json"

DEFAULT_AC_PORT = "COM2"
DEFAULT_DC_PORT = "COM3"

# snake_case field -> on-disk key
_FILE_KEYS = {
    "ac_port_name": "ACPortName",
    "dc_port_name": "DCPortName",
    "ac_mode": "ACMode",
    "dc_mode": "DCMode",
}


@dataclass(frozen=True)
class Configuration:
    """Port name and wiring polarity for both relay channels."""

    ac_port_name: str = DEFAULT_AC_PORT
    dc_port_name: str = DEFAULT_DC_PORT
    ac_mode: bool = True  # normally-open
    dc_mode: bool = True  # normally-open

    def port_for(self, channel: Channel) -> str:
        return self.ac_port_name if channel is Channel.AC else self.dc_port_name

    def polarity_for(self, channel: Channel) -> Polarity:
        mode = self.ac_mode if channel is Channel.AC else self.dc_mode
        return Polarity.from_mode(mode)

    def with_port(self, channel: Channel, port_name: str) -> Configuration:
        field = "ac_port_name" if channel is Channel.AC else "dc_port_name"
        return replace(self, **{field: port_name})

    def with_polarity(self, channel: Channel, polarity: bool | Polarity) -> Configuration:
        field = "ac_mode" if channel is Channel.AC else "dc_mode"
        return replace(self, **{field: Polarity.from_mode(polarity).value})

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the on-disk key names."""
        return {_FILE_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Configuration:
        """Build from on-disk keys, or the snake_case field names.

        Raises:
            ConfigLoadError: If a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ConfigLoadError(f"Configuration must be an object, got {type(data).__name__}")

        values: dict[str, Any] = {}
        for field, key in _FILE_KEYS.items():
            if key in data:
                value = data[key]
            elif field in data:
                value = data[field]
            else:
                raise ConfigLoadError(f"Configuration is missing '{key}'")

            expected = bool if field.endswith("_mode") else str
            if not isinstance(value, expected):
                raise ConfigLoadError(
                    f"'{key}' must be {expected.__name__}, got {type(value).__name__}"
                )
            values[field] = value
        return cls(**values)


def default_config_path() -> Path:
    """``$REPEATER_POWER_CONFIG`` if set, else ``config.json`` in the cwd."""
    return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)


def load_configuration(path: str | Path | None = None) -> Configuration:
    """Read a configuration file.

    Raises:
        ConfigLoadError: If the file is missing, unreadable, or malformed.
    """
    path = Path(path) if path is not None else default_config_path()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Corrupt configuration in {path}: {e}") from e

    return Configuration.from_dict(data)


def load_or_default(path: str | Path | None = None) -> Configuration:
    """Load the configuration, falling back to built-in defaults."""
    try:
        return load_configuration(path)
    except ConfigLoadError as e:
        logger.warning("Using default configuration: %s", e)
        return Configuration()


def save_configuration(config: Configuration, path: str | Path | None = None) -> Path:
    """Truncate and rewrite the configuration file.

    Returns:
        The path written to.

    Raises:
        ConfigSaveError: If the file cannot be written.
    """
    path = Path(path) if path is not None else default_config_path()
    try:
        path.write_text(json.dumps(config.to_dict()) + "\n", encoding="utf-8")
    except OSError as e:
        raise ConfigSaveError(f"Cannot write {path}: {e}") from e
    logger.info("Saved configuration to %s", path)
    return path
