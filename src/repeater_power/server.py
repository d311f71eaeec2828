"""MCP server entry point for remote repeater power control.

Exposes the relay actions and configuration as tools and resources via
the Model Context Protocol using the official Python MCP SDK with stdio
transport, so an off-site operator can switch the relays.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from .controller import RelayController
from .errors import ConfigSaveError
from .models.configuration import (
    Configuration,
    default_config_path,
    load_or_default,
    save_configuration,
)
from .models.relay import Channel, Polarity
from .protocol.commands import Action
from .transport.serial_connection import SerialTransport, list_ports

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "repeater-power",
    instructions="Switch a radio repeater site's AC and DC power relays over serial",
)

# Server state: config file location and the controller built from it
_config_path: Path | None = None
_controller: RelayController | None = None


def _get_controller() -> RelayController:
    """Get the relay controller, loading the configuration on first use."""
    global _controller, _config_path
    if _controller is None:
        if _config_path is None:
            _config_path = default_config_path()
        _controller = RelayController(load_or_default(_config_path), SerialTransport())
    return _controller


def _update_config(config: Configuration) -> dict[str, Any]:
    controller = _get_controller()
    controller.config = config
    result: dict[str, Any] = {"configuration": _describe(config)}
    try:
        save_configuration(config, _config_path)
        result["saved"] = True
    except ConfigSaveError as e:
        result["saved"] = False
        result["error"] = str(e)
    return result


def _describe(config: Configuration) -> dict[str, Any]:
    return {
        channel.value: {
            "port": config.port_for(channel),
            "mode": config.polarity_for(channel).short,
        }
        for channel in Channel
    }


def _run(channel: str, action: Action) -> dict[str, Any]:
    try:
        target = Channel.parse(channel)
    except ValueError as e:
        return {"error": str(e)}
    result = _get_controller().perform(target, action)
    return result.to_dict()


# ─── RELAY TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def power_off(channel: str) -> dict[str, Any]:
    """Turn a relay channel's power off.

    Args:
        channel: "ac" or "dc".
    """
    return _run(channel, Action.POWER_OFF)


@mcp.tool()
def power_on(channel: str) -> dict[str, Any]:
    """Turn a relay channel's power on.

    Args:
        channel: "ac" or "dc".
    """
    return _run(channel, Action.POWER_ON)


@mcp.tool()
def power_cycle(channel: str) -> dict[str, Any]:
    """Turn a channel off, wait two seconds, and turn it back on.

    Blocks for about four seconds. The relay board sends no
    acknowledgement; "ok" only means the frames reached the serial port.

    Args:
        channel: "ac" or "dc".
    """
    return _run(channel, Action.POWER_CYCLE)


# ─── CONFIGURATION TOOLS ─────────────────────────────────────────────

@mcp.tool()
def get_configuration() -> dict[str, Any]:
    """Show the serial port and wiring mode (NO/NC) of each relay."""
    return _describe(_get_controller().config)


@mcp.tool()
def set_port(channel: str, port_name: str) -> dict[str, Any]:
    """Change the serial port a relay channel is attached to and save it.

    Args:
        channel: "ac" or "dc".
        port_name: Serial device, e.g. "COM4" or "/dev/ttyUSB0".
    """
    try:
        target = Channel.parse(channel)
    except ValueError as e:
        return {"error": str(e)}
    port_name = port_name.strip()
    if not port_name:
        return {"error": "Port name must not be empty"}
    return _update_config(_get_controller().config.with_port(target, port_name))


@mcp.tool()
def set_mode(channel: str, mode: str) -> dict[str, Any]:
    """Change a relay channel's wiring mode and save it.

    Args:
        channel: "ac" or "dc".
        mode: "no" if the load is on the normally-open contact,
              "nc" if it is on the normally-closed contact.
    """
    try:
        target = Channel.parse(channel)
        polarity = Polarity.parse(mode)
    except ValueError as e:
        return {"error": str(e)}
    return _update_config(_get_controller().config.with_polarity(target, polarity))


@mcp.tool()
def list_serial_ports() -> dict[str, list[str]]:
    """List the serial devices the host currently reports."""
    return {"ports": list_ports()}


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("repeater-power://configuration")
def configuration_resource() -> str:
    """Current relay configuration as stored on disk."""
    return json.dumps(_get_controller().config.to_dict(), indent=2)


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
