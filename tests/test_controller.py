"""Tests for relay actions bound to a configuration."""

from unittest.mock import MagicMock, call

from repeater_power.controller import RelayController
from repeater_power.errors import OpenFailedError
from repeater_power.models.configuration import Configuration
from repeater_power.models.relay import Channel
from repeater_power.protocol.commands import Action
from repeater_power.protocol.framing import OFF_FRAME, ON_FRAME


def _controller(config=None):
    transport = MagicMock()
    sleep = MagicMock()
    controller = RelayController(config or Configuration(), transport=transport, sleep=sleep)
    return controller, transport, sleep


def test_power_off_normally_open_sends_on_frame():
    controller, transport, _ = _controller()
    result = controller.power_off(Channel.AC)

    transport.send.assert_called_once_with("COM2", ON_FRAME)
    assert result.ok
    assert result.frames == [ON_FRAME]


def test_power_on_normally_closed_uses_dc_port():
    controller, transport, _ = _controller(Configuration(dc_mode=False))
    controller.power_on(Channel.DC)
    transport.send.assert_called_once_with("COM3", ON_FRAME)


def test_power_cycle_normally_open_order():
    """NO cycle: ON_FRAME (off intent) then OFF_FRAME (on intent), two sends."""
    controller, transport, sleep = _controller()
    result = controller.power_cycle(Channel.AC)

    assert transport.send.call_args_list == [call("COM2", ON_FRAME), call("COM2", OFF_FRAME)]
    assert sleep.call_args_list == [call(2.0), call(2.0)]
    assert result.action is Action.POWER_CYCLE
    assert result.ok


def test_power_cycle_normally_closed_order():
    controller, transport, _ = _controller(Configuration(ac_mode=False))
    controller.power_cycle(Channel.AC)
    assert transport.send.call_args_list == [call("COM2", OFF_FRAME), call("COM2", ON_FRAME)]


def test_power_cycle_reports_steps_between_sends():
    controller, transport, sleep = _controller()
    events = []
    transport.send.side_effect = lambda port, frame: events.append(("send", frame))
    sleep.side_effect = lambda s: events.append(("sleep", s))

    controller.power_cycle(Channel.DC, on_step=lambda a, e: events.append(("step", a, e)))

    assert events == [
        ("send", ON_FRAME),
        ("step", Action.POWER_OFF, None),
        ("sleep", 2.0),
        ("send", OFF_FRAME),
        ("step", Action.POWER_ON, None),
        ("sleep", 2.0),
    ]


def test_transport_error_is_reported_not_raised():
    controller, transport, _ = _controller()
    error = OpenFailedError("COM2", "could not open port")
    transport.send.side_effect = error

    result = controller.power_on(Channel.AC)

    assert not result.ok
    assert result.errors == [error]
    assert result.to_dict()["errors"] == ["COM2: could not open port"]


def test_power_cycle_sends_both_halves_after_failure():
    controller, transport, _ = _controller()
    transport.send.side_effect = OpenFailedError("COM2", "busy")

    result = controller.power_cycle(Channel.AC)

    assert transport.send.call_count == 2
    assert len(result.errors) == 2


def test_config_change_takes_effect():
    controller, transport, _ = _controller()
    controller.config = controller.config.with_port(Channel.AC, "COM9")
    controller.perform(Channel.AC, Action.POWER_OFF)
    transport.send.assert_called_once_with("COM9", ON_FRAME)


def test_result_to_dict():
    controller, _, _ = _controller()
    data = controller.power_off(Channel.DC).to_dict()
    assert data == {
        "channel": "dc",
        "action": "off",
        "port": "COM3",
        "frames": ["A0 01 01 A2"],
        "ok": True,
        "errors": [],
    }


def test_power_cycle_step_carries_send_error():
    controller, transport, _ = _controller()
    error = OpenFailedError("COM2", "could not open port")
    transport.send.side_effect = [error, None]
    steps = []

    controller.power_cycle(Channel.AC, on_step=lambda a, e: steps.append((a, e)))

    assert steps == [(Action.POWER_OFF, error), (Action.POWER_ON, None)]
