"""Interactive menu for the repeater site operator.

Every relay action reports its outcome: a hardware fault shows up as a
WARNING line and the menu stays usable for the next attempt.
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Callable

from . import __version__
from .controller import ActionResult, RelayController, Transport
from .errors import ConfigSaveError, TransportError
from .models.configuration import (
    Configuration,
    default_config_path,
    load_or_default,
    save_configuration,
)
from .models.relay import Channel, Polarity
from .protocol.commands import Action
from .transport.serial_connection import list_ports

logger = logging.getLogger(__name__)

LOOP_PAUSE_SECONDS = 1.0
INVALID_MODE_PAUSE_SECONDS = 2.0
INFO_DISPLAY_SECONDS = 6.0

MENU = f"""

  |-------------------------------------|
  |   Repeater System Power Control App |
  |                v{__version__:<8}            |
  |-------------------------------------|


   1. AC Power Off
   2. AC Power On
   -----------------
   3. DC Power Off
   4. DC Power On
   -----------------
   5. AC Power Cycle
   6. DC Power Cycle
   -----------------
   7. Change COM Ports
   8. Change Mode (NO/NC) for AC
   9. Change Mode (NO/NC) for DC
   C. Current Configuration
   I. Software Info
   E. Exit
"""

RELAY_DIAGRAM = """\
NC if the relay is wired on NC connector  | NO if the relay is wired on NO connector


| --------- |
| |       | |
| | Relay | |
| |       | |
| --------- |
| |X||X||X| |

   N  C  N
   O  O  C
      M
------------------------"""

INFO_BANNER = f"""

  |----------------------------------------------|
  |      Repeater System Power Control App       |
  |                   v{__version__:<8}                  |
  |----------------------------------------------|
  |               Written By: KD9HAE             |
  |----------------------------------------------|
  | https://github.com/jfeyen4249/repeater_power |
  |----------------------------------------------|"""

# menu key -> (channel, action)
RELAY_OPTIONS: dict[str, tuple[Channel, Action]] = {
    "1": (Channel.AC, Action.POWER_OFF),
    "2": (Channel.AC, Action.POWER_ON),
    "3": (Channel.DC, Action.POWER_OFF),
    "4": (Channel.DC, Action.POWER_ON),
    "5": (Channel.AC, Action.POWER_CYCLE),
    "6": (Channel.DC, Action.POWER_CYCLE),
}


def clear_screen() -> None:
    command = ["cmd", "/c", "cls"] if os.name == "nt" else ["clear"]
    try:
        subprocess.run(command, check=False)
    except OSError as e:
        logger.debug("Could not clear screen: %s", e)


class Console:
    """The numbered menu loop.

    The configuration lives on the instance and is passed to the
    controller; it is saved to ``config_path`` whenever the operator
    changes it.
    """

    def __init__(
        self,
        config: Configuration,
        config_path: str | Path,
        transport: Transport | None = None,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        sleep: Callable[[float], None] = time.sleep,
        clear: Callable[[], None] | None = clear_screen,
        ports_fn: Callable[[], list[str]] = list_ports,
    ) -> None:
        self.config_path = Path(config_path)
        self.controller = RelayController(config, transport=transport, sleep=sleep)
        self._input = input_fn
        self._output = output
        self._sleep = sleep
        self._clear = clear
        self._ports_fn = ports_fn

    @property
    def config(self) -> Configuration:
        return self.controller.config

    @config.setter
    def config(self, value: Configuration) -> None:
        self.controller.config = value

    # ─── I/O HELPERS ─────────────────────────────────────────────────

    def _say(self, text: str = "") -> None:
        self._output(text)

    def _ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def _clear_screen(self) -> None:
        if self._clear:
            self._clear()

    def _save(self) -> bool:
        try:
            save_configuration(self.config, self.config_path)
        except ConfigSaveError as e:
            self._say(f"Error saving configuration: {e}")
            return False
        return True

    def _report(self, result: ActionResult) -> None:
        name = f"{result.channel.label} {result.action.label}"
        if result.ok:
            self._say(name)
            return
        for error in result.errors:
            self._say(f"WARNING: {name} failed: {error}")

    # ─── LOOP ────────────────────────────────────────────────────────

    def run(self) -> int:
        """Show the menu until the operator exits. Returns the exit status."""
        while True:
            self._clear_screen()
            self._say(MENU)
            try:
                choice = self._ask("  Select an option: ")
            except EOFError:
                self._say("Exiting...")
                return 0

            try:
                keep_going, pause = self.handle(choice)
            except EOFError:
                self._say("Exiting...")
                return 0
            if not keep_going:
                return 0
            if pause:
                self._sleep(LOOP_PAUSE_SECONDS)

    def handle(self, choice: str) -> tuple[bool, bool]:
        """Run one menu option.

        Returns:
            ``(keep_going, pause)``: whether the loop continues and whether
            it should pause before redrawing the menu.
        """
        key = choice.strip().lower()

        if key in RELAY_OPTIONS:
            channel, action = RELAY_OPTIONS[key]
            self._clear_screen()
            if action is Action.POWER_CYCLE:
                self._cycle(channel)
            else:
                self._report(self.controller.perform(channel, action))
            return True, True
        if key == "7":
            self._change_ports()
            return True, True
        if key in ("8", "9"):
            channel = Channel.AC if key == "8" else Channel.DC
            return True, self._change_mode(channel)
        if key == "c":
            self._show_configuration()
            return True, True
        if key == "i":
            self._show_info()
            return True, True
        if key == "e":
            self._say("Exiting...")
            return False, False

        self._say("")
        self._say("")
        self._say("Invalid option. Please select a valid option (1-9, c, i, e to exit).")
        return True, True

    # ─── ACTIONS ─────────────────────────────────────────────────────

    def _cycle(self, channel: Channel) -> None:
        self._say("")
        self._say("  |-------------------------------------|")
        self._say(f"  |        Power Cycling {channel.label} Power       |")
        self._say("  |             Please wait...          |")
        self._say("  |-------------------------------------|")

        def step(action: Action, error: TransportError | None) -> None:
            state = "Turned Off" if action is Action.POWER_OFF else "Turned On"
            if error is None:
                self._say(f"Cycling {channel.label} Power ({state})")
            else:
                self._say(f"WARNING: Cycling {channel.label} Power ({state}) failed: {error}")

        self.controller.power_cycle(channel, on_step=step)

    def _change_ports(self) -> None:
        self._clear_screen()
        ports = self._ports_fn()
        if ports:
            self._say(f"Available serial ports: {', '.join(ports)}")
        self._say("")
        for channel in Channel:
            current = self.config.port_for(channel)
            port = self._ask(
                f"Enter new {channel.label} COM Port (e.g., COM4, or press Enter "
                f"to keep it unchanged ({current})): "
            )
            if port:
                self.config = self.config.with_port(channel, port)
            self._say("")

        if self._save():
            self._say("COM Ports changed and saved.")

    def _change_mode(self, channel: Channel) -> bool:
        self._clear_screen()
        self._say("")
        self._say(f"{channel.label} Relay Connections")
        self._say("--------------------")
        self._say(RELAY_DIAGRAM)
        answer = self._ask(f"Select mode for {channel.label} (no/nc): ")
        try:
            polarity = Polarity.parse(answer)
        except ValueError:
            self._say("Invalid mode. Please enter 'no' or 'nc'.")
            self._sleep(INVALID_MODE_PAUSE_SECONDS)
            return False

        self.config = self.config.with_polarity(channel, polarity)
        if self._save():
            self._say("")
            self._say(f"{channel.label} Mode changed and saved.")
        return True

    def _show_configuration(self) -> None:
        self._clear_screen()
        self._say("")
        self._say("   |------------|----------------------|------------|")
        self._say("   |            |  Relay Config Mode   |  COM Port  |")
        self._say("   |------------|----------------------|------------|")
        for channel in Channel:
            mode = self.config.polarity_for(channel).description
            port = self.config.port_for(channel)
            self._say(f"   |  {channel.label} Relay  | {mode:<20} | {port:<10} |")
            self._say("   |------------|----------------------|------------|")
        self._say("")
        self._ask("Press Enter to continue...")

    def _show_info(self) -> None:
        self._clear_screen()
        self._say(INFO_BANNER)
        self._sleep(INFO_DISPLAY_SECONDS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repeater-power",
        description="Switch repeater site AC/DC power relays over serial.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="configuration file (default: $REPEATER_POWER_CONFIG or ./config.json)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: WARNING)",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="do not clear the terminal between screens",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the interactive menu."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    config_path = args.config if args.config is not None else default_config_path()
    console = Console(
        load_or_default(config_path),
        config_path,
        clear=None if args.no_clear else clear_screen,
    )
    try:
        return console.run()
    except KeyboardInterrupt:
        print()
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
