"""Workflow engine — the state machine driving the operator console."""

from __future__ import annotations

import logging
from collections.abc import Callable

from plcconsole.addressing import parse_address
from plcconsole.device.models import TrustState
from plcconsole.errors import InputClosed
from plcconsole.i18n import Locale
from plcconsole.workflow.commands import CommandDispatcher
from plcconsole.workflow.revalidation import check_for_changes
from plcconsole.workflow.states import WorkflowContext, WorkflowState

logger = logging.getLogger(__name__)

BANNER = "Controller Configuration Console"
QUIT_HINT = "Press 'Ctrl+C' at any time to quit"

_LANGUAGE_CHOICES = {str(i): locale for i, locale in enumerate(Locale, start=1)}

_TRUST_ALWAYS = "1"
_TRUST_NEVER = "2"


class WorkflowEngine:
    """Runs the console one state at a time until the operator exits.

    Each handler performs a single state's work and returns the next state.
    Returning the current state re-prompts it on the next iteration.
    """

    def __init__(
        self, ctx: WorkflowContext, dispatcher: CommandDispatcher | None = None
    ) -> None:
        self._ctx = ctx
        self._dispatcher = dispatcher or CommandDispatcher()
        self._handlers: dict[WorkflowState, Callable[[], WorkflowState]] = {
            WorkflowState.INTRODUCTION: self._introduction,
            WorkflowState.LANGUAGE_SELECTION: self._language_selection,
            WorkflowState.NIC_SELECTION: self._nic_selection,
            WorkflowState.IP_ADDRESS_ENTRY: self._ip_address_entry,
            WorkflowState.CERTIFICATE_TRUST_SELECTION: self._certificate_trust_selection,
            WorkflowState.PASSWORD_ENTRY: self._password_entry,
            WorkflowState.COMMAND_SELECTION: self._command_selection,
        }

    @property
    def context(self) -> WorkflowContext:
        return self._ctx

    @property
    def state(self) -> WorkflowState:
        return self._ctx.state

    def run(
        self,
        initial_address: str | None = None,
        initial_interface_index: int | None = None,
    ) -> None:
        """Drive the console until exit, end of input, or an unexpected error.

        With both initial arguments the interface, address and certificate
        steps are taken from them; any failure there returns immediately.
        """
        try:
            if initial_address is not None and initial_interface_index is not None:
                if not self._initialize(initial_address, initial_interface_index):
                    logger.info("Headless initialization failed — exiting")
                    return
            self._loop()
        except (InputClosed, KeyboardInterrupt):
            logger.info("Input closed — exiting")
        except Exception:
            logger.exception("Workflow error in state %s", self._ctx.state)
            self._ctx.state = WorkflowState.EXIT_APPLICATION

    def _loop(self) -> None:
        ctx = self._ctx
        while ctx.state is not WorkflowState.EXIT_APPLICATION:
            current = ctx.state
            handler = self._handlers.get(current)
            if handler is None:
                logger.error("Unknown workflow state: %r", current)
                ctx.say("internalError", style="bold red")
                ctx.state = WorkflowState.EXIT_APPLICATION
                continue
            next_state = handler()
            if next_state is not current:
                logger.debug("Transition %s -> %s", current.value, next_state.value)
            ctx.state = next_state

    # --- Headless fast path ---

    def _initialize(self, address: str, interface_index: int) -> bool:
        ctx = self._ctx
        session = ctx.session

        ctx.io.write_line("Determining network interfaces...", style="dim")
        result, names = session.list_interfaces()
        if result.failed or not names:
            if result.failed:
                ctx.sink.result(result)
            ctx.say("noNICOptions")
            return False

        ctx.io.write_line("Selecting network interface...", style="dim")
        if not 1 <= interface_index <= len(names):
            ctx.say("commandError")
            return False
        result = session.select_interface(names[interface_index - 1])
        ctx.sink.result(result)
        if result.failed:
            return False

        ctx.io.write_line(f"Connecting to {address}...", style="dim")
        if not self._connect(address, ""):
            return False

        ctx.io.write_line("Resolving certificate trust...", style="dim")
        if self._resolve_trust() is not WorkflowState.PASSWORD_ENTRY:
            return False

        self._dispatcher.print_basic_info(ctx)

        if session.password_required and not session.password_valid:
            ctx.state = WorkflowState.PASSWORD_ENTRY
        else:
            ctx.state = WorkflowState.COMMAND_SELECTION
        return True

    # --- State handlers ---

    def _introduction(self) -> WorkflowState:
        self._ctx.io.write_line(BANNER, style="bold")
        self._ctx.io.write_line(QUIT_HINT)
        return WorkflowState.LANGUAGE_SELECTION

    def _language_selection(self) -> WorkflowState:
        ctx = self._ctx
        # Shown before a locale exists, so not localized
        ctx.io.write_line()
        ctx.io.write_line("Select from the following language options: ")
        for choice, locale in _LANGUAGE_CHOICES.items():
            ctx.io.write_line(f"\t{choice}: {locale.native_name}")
        ctx.io.write_line()
        choice = ctx.io.read_line("Language Selection: ")

        locale = _LANGUAGE_CHOICES.get(choice)
        if locale is None:
            ctx.say("commandError")
            return WorkflowState.LANGUAGE_SELECTION
        ctx.locale = locale
        logger.debug("Locale set to %s", locale.value)
        return WorkflowState.NIC_SELECTION

    def _nic_selection(self) -> WorkflowState:
        ctx = self._ctx
        result, names = ctx.session.list_interfaces()
        if result.failed or not names:
            if result.failed:
                ctx.sink.result(result)
            ctx.say("noNICOptions")
            return WorkflowState.EXIT_APPLICATION

        ctx.io.write_line()
        ctx.say("selectNICQuestion")
        for i, name in enumerate(names, start=1):
            ctx.io.write_line(f"\t{i}: {name}")
        ctx.io.write_line()
        index = _parse_choice(ctx.ask("networkInterfacePrompt"), len(names))

        if index is not None:
            result = ctx.session.select_interface(names[index - 1])
            ctx.sink.result(result)
            if result.succeeded:
                return WorkflowState.IP_ADDRESS_ENTRY
        ctx.say("commandError")
        return WorkflowState.NIC_SELECTION

    def _ip_address_entry(self) -> WorkflowState:
        ctx = self._ctx
        ctx.io.write_line()
        raw_address = ctx.ask("targetIPAddressPrompt")
        raw_router = ctx.ask("routerIPAddressPrompt")
        if self._connect(raw_address, raw_router):
            return WorkflowState.CERTIFICATE_TRUST_SELECTION
        return WorkflowState.IP_ADDRESS_ENTRY

    def _certificate_trust_selection(self) -> WorkflowState:
        return self._resolve_trust()

    def _password_entry(self) -> WorkflowState:
        ctx = self._ctx
        session = ctx.session
        if not session.password_required or (
            session.password_valid and session.has_sufficient_access
        ):
            return self._leave_password_entry()

        ctx.io.write_line()
        secret = ctx.ask("enterPasswordQuestion", secret=True)
        if not secret:
            ctx.say("emptyPasswordError")
            return WorkflowState.PASSWORD_ENTRY

        result = session.set_password(secret)
        if result.failed:
            ctx.sink.result(result)
            return WorkflowState.PASSWORD_ENTRY

        if session.password_valid and not session.has_sufficient_access:
            ctx.say("insufficientAccessError")
            return WorkflowState.PASSWORD_ENTRY
        if not session.password_valid:
            ctx.say("invalidPasswordError")
            return WorkflowState.PASSWORD_ENTRY

        ctx.sink.result(result)
        return self._leave_password_entry()

    def _command_selection(self) -> WorkflowState:
        ctx = self._ctx
        choice = self._dispatcher.prompt(ctx)
        next_state = self._dispatcher.dispatch(choice, ctx)
        if next_state is None:
            next_state = WorkflowState.COMMAND_SELECTION

        # Runs after every command, including 8 and 9
        reverted = check_for_changes(ctx)
        return reverted if reverted is not None else next_state

    # --- Shared steps ---

    def _connect(self, raw_address: str, raw_router: str) -> bool:
        ctx = self._ctx
        address = parse_address(raw_address)
        if address is None:
            ctx.say("parsingError")
            return False

        router = None
        if raw_router:
            router = parse_address(raw_router)
            if router is None:
                ctx.say("parsingError")
                return False

        report = ctx.session.connect(address, router)
        if report.failed:
            ctx.sink.scan_report(report)
            return False

        if not ctx.session.is_supported_kind:
            ctx.say("notSupportedError")
            ctx.session.release()
            return False

        ctx.sink.scan_report(report)
        return True

    def _resolve_trust(self) -> WorkflowState:
        ctx = self._ctx
        session = ctx.session
        if not session.trust_required or session.trust_state is TrustState.ALWAYS:
            return WorkflowState.PASSWORD_ENTRY

        ctx.io.write_line()
        ctx.say("tlsQuestion")
        ctx.option("tlsAlwaysOption")
        ctx.option("tlsNeverOption")
        ctx.io.write_line()
        choice = ctx.ask("certificateOptionPrompt")

        if choice == _TRUST_ALWAYS:
            result = session.set_trust(TrustState.ALWAYS)
            ctx.sink.result(result)
            if result.failed:
                return WorkflowState.CERTIFICATE_TRUST_SELECTION
            return WorkflowState.PASSWORD_ENTRY

        if choice == _TRUST_NEVER:
            ctx.sink.result(session.set_trust(TrustState.NEVER))
            ctx.say("communicationsDisabledWarning", style="yellow")
            # Nothing may keep talking to a rejected endpoint
            session.release()
            return WorkflowState.IP_ADDRESS_ENTRY

        ctx.say("commandError")
        return WorkflowState.CERTIFICATE_TRUST_SELECTION

    def _leave_password_entry(self) -> WorkflowState:
        session = self._ctx.session
        # A certificate reset can arrive together with a password change
        if session.trust_required and session.trust_state is TrustState.SELECTION_NEEDED:
            return WorkflowState.CERTIFICATE_TRUST_SELECTION
        return self._enter_command_selection()

    def _enter_command_selection(self) -> WorkflowState:
        self._dispatcher.print_basic_info(self._ctx)
        return WorkflowState.COMMAND_SELECTION


def _parse_choice(text: str, count: int) -> int | None:
    """Parse a 1-based menu choice, or None when out of range."""
    try:
        value = int(text)
    except ValueError:
        return None
    if 1 <= value <= count:
        return value
    return None
