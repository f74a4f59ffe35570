"""Command dispatcher — the numbered menu offered once a device is ready."""

from __future__ import annotations

import logging
from collections.abc import Callable

from plcconsole.addressing import parse_address
from plcconsole.console.progress import ProgressMeter
from plcconsole.device.models import OperatingState
from plcconsole.workflow.states import WorkflowContext, WorkflowState

logger = logging.getLogger(__name__)

# Menu entries in display order; entry N is chosen with "N"
MENU_KEYS = (
    "identify",
    "basicDeviceInfo",
    "moduleInfo",
    "changeOperatingState",
    "setIP",
    "setStationName",
    "firmwareUpdate",
    "pickNewDevice",
    "exit",
)

_OPERATING_CHOICES = {
    "1": OperatingState.RUN,
    "2": OperatingState.STOP,
}

Command = Callable[[WorkflowContext], WorkflowState | None]


class CommandDispatcher:
    """Maps a menu choice to a device session operation.

    Each command returns the state to move to, or None to stay in
    command selection.
    """

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {
            "1": self.identify,
            "2": self.print_basic_info,
            "3": self.print_module_info,
            "4": self.change_operating_state,
            "5": self.set_address,
            "6": self.set_station_name,
            "7": self.firmware_update,
            "8": self.pick_new_device,
            "9": self.exit,
        }

    def prompt(self, ctx: WorkflowContext) -> str:
        ctx.io.write_line()
        ctx.say("commandQuestion")
        for key in MENU_KEYS:
            ctx.option(key)
        ctx.io.write_line()
        return ctx.ask("promptForCommand")

    def dispatch(self, choice: str, ctx: WorkflowContext) -> WorkflowState | None:
        command = self._commands.get(choice)
        if command is None:
            ctx.say("commandError")
            return None
        logger.debug("Dispatching command %s (%s)", choice, command.__name__)
        return command(ctx)

    # --- Commands ---

    def identify(self, ctx: WorkflowContext) -> None:
        ctx.sink.result(ctx.session.identify())

    def print_basic_info(self, ctx: WorkflowContext) -> None:
        # Handle fields are only current after a refresh
        result = ctx.session.refresh_status()
        if result.failed:
            ctx.sink.result(result)
            return
        ctx.io.write_line()
        ctx.sink.device_info(ctx.session.handle)

    def print_module_info(self, ctx: WorkflowContext) -> None:
        result = ctx.session.refresh_status()
        ctx.sink.result(result)
        if result.failed:
            return

        modules = ctx.session.handle.modules
        if not modules:
            ctx.say("noModulesFoundError")
            return
        for module in modules:
            ctx.sink.module_info(module)

    def change_operating_state(self, ctx: WorkflowContext) -> None:
        while True:
            ctx.io.write_line()
            ctx.say("operatingStateQuestion")
            ctx.option("runChoice")
            ctx.option("stopChoice")
            ctx.io.write_line()
            state = _OPERATING_CHOICES.get(ctx.ask("statePrompt"))
            if state is not None:
                break
            ctx.say("commandError")

        ctx.sink.result(ctx.session.set_operating_state(state))

    def set_address(self, ctx: WorkflowContext) -> None:
        ctx.io.write_line()
        ip = parse_address(ctx.ask("enterIPQuestion"))
        if ip is None:
            ctx.say("invalidIP")
            return

        subnet = parse_address(ctx.ask("enterSubnetQuestion"))
        if subnet is None:
            ctx.say("invalidSubnet")
            return

        gateway = parse_address(ctx.ask("enterGatewayQuestion"))
        if gateway is None:
            ctx.say("invalidGateway")
            return

        ctx.sink.result(ctx.session.set_address(ip, subnet, gateway))

    def set_station_name(self, ctx: WorkflowContext) -> None:
        ctx.io.write_line()
        name = ctx.ask("stationNameQuestion")
        ctx.sink.result(ctx.session.set_name(name))

    def firmware_update(self, ctx: WorkflowContext) -> None:
        session = ctx.session
        while True:
            ctx.io.write_line()
            path = ctx.ask("firmwareFilePathQuestion")
            result = session.set_firmware_file(path)
            if result.succeeded:
                break
            ctx.sink.result(result)

        meter = ProgressMeter(ctx.io, step=ctx.config.progress_step)
        ctx.io.write(ctx.text("progressBar"))
        with session.progress_listener(meter):
            result = session.update_firmware()
        ctx.io.write_line()
        ctx.sink.result(result)
        ctx.io.write_line()

    def pick_new_device(self, ctx: WorkflowContext) -> WorkflowState:
        return WorkflowState.IP_ADDRESS_ENTRY

    def exit(self, ctx: WorkflowContext) -> WorkflowState:
        return WorkflowState.EXIT_APPLICATION
