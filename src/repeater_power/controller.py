"""Relay actions bound to a configuration.

The controller resolves each action against the channel's port and
polarity, hands the frames to the transport, and reports what happened
instead of dropping transport errors.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from .errors import TransportError
from .models.configuration import Configuration
from .models.relay import Channel
from .protocol.commands import Action, CYCLE_SETTLE_SECONDS, cycle_frames, select_frame
from .protocol.framing import Frame
from .transport.serial_connection import SerialTransport

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def send(self, port_name: str, frame: Frame) -> None:
        """Deliver one frame or raise TransportError."""


@dataclass
class ActionResult:
    """Outcome of one operator action on one channel."""

    channel: Channel
    action: Action
    port_name: str
    frames: list[Frame] = field(default_factory=list)
    errors: list[TransportError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel.value,
            "action": self.action.value,
            "port": self.port_name,
            "frames": [f.hex() for f in self.frames],
            "ok": self.ok,
            "errors": [str(e) for e in self.errors],
        }


class RelayController:
    """Drives the AC and DC relays for one configuration."""

    def __init__(
        self,
        config: Configuration,
        transport: Transport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        settle_seconds: float = CYCLE_SETTLE_SECONDS,
    ) -> None:
        self.config = config
        self._transport = transport if transport is not None else SerialTransport()
        self._sleep = sleep
        self._settle_seconds = settle_seconds

    def _send(self, result: ActionResult, frame: Frame) -> TransportError | None:
        result.frames.append(frame)
        try:
            self._transport.send(result.port_name, frame)
        except TransportError as e:
            result.errors.append(e)
            return e
        return None

    def _switch(self, channel: Channel, action: Action) -> ActionResult:
        port_name = self.config.port_for(channel)
        polarity = self.config.polarity_for(channel)
        result = ActionResult(channel=channel, action=action, port_name=port_name)
        self._send(result, select_frame(action, polarity))
        logger.info(
            "%s %s on %s (%s): %s",
            channel.label, action.label, port_name, polarity.short,
            "ok" if result.ok else result.errors[0],
        )
        return result

    def power_off(self, channel: Channel) -> ActionResult:
        return self._switch(channel, Action.POWER_OFF)

    def power_on(self, channel: Channel) -> ActionResult:
        return self._switch(channel, Action.POWER_ON)

    def power_cycle(
        self,
        channel: Channel,
        on_step: Callable[[Action, TransportError | None], None] | None = None,
    ) -> ActionResult:
        """Turn the channel off, settle, turn it back on, settle.

        Both halves are always sent, even if the first one fails, and each
        frame is resolved through the channel's polarity.

        Args:
            channel: Channel to cycle.
            on_step: Called right after each frame is sent with the step
                (``POWER_OFF`` then ``POWER_ON``) and its transport error,
                or ``None`` if the frame was delivered.
        """
        port_name = self.config.port_for(channel)
        polarity = self.config.polarity_for(channel)
        result = ActionResult(channel=channel, action=Action.POWER_CYCLE, port_name=port_name)
        off_frame, on_frame = cycle_frames(polarity)

        error = self._send(result, off_frame)
        if on_step:
            on_step(Action.POWER_OFF, error)
        self._sleep(self._settle_seconds)

        error = self._send(result, on_frame)
        if on_step:
            on_step(Action.POWER_ON, error)
        self._sleep(self._settle_seconds)

        logger.info(
            "%s power cycle on %s (%s): %d error(s)",
            channel.label, port_name, polarity.short, len(result.errors),
        )
        return result

    def perform(self, channel: Channel, action: Action) -> ActionResult:
        """Dispatch any :class:`Action` to the matching method."""
        if action is Action.POWER_CYCLE:
            return self.power_cycle(channel)
        return self._switch(channel, action)
