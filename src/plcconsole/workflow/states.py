"""Workflow states and the context passed through every transition."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from plcconsole.config import ConsoleConfig
from plcconsole.console.io import ConsoleIO
from plcconsole.console.messages import MessageSink
from plcconsole.device.backend import DeviceBackend
from plcconsole.device.session import DeviceSession
from plcconsole.i18n import Locale, StringCatalog, Translator


class WorkflowState(enum.Enum):
    """Console states, in the order they are first presented."""

    INTRODUCTION = "introduction"
    LANGUAGE_SELECTION = "language_selection"
    NIC_SELECTION = "nic_selection"
    IP_ADDRESS_ENTRY = "ip_address_entry"
    CERTIFICATE_TRUST_SELECTION = "certificate_trust_selection"
    PASSWORD_ENTRY = "password_entry"
    COMMAND_SELECTION = "command_selection"
    EXIT_APPLICATION = "exit_application"


@dataclass
class WorkflowContext:
    """Everything a state handler may read or change.

    The engine owns exactly one of these for the life of the process.
    """

    session: DeviceSession
    io: ConsoleIO
    translate: Translator
    sink: MessageSink
    config: ConsoleConfig = field(default_factory=ConsoleConfig)
    state: WorkflowState = WorkflowState.INTRODUCTION

    @property
    def locale(self) -> Locale:
        return self.translate.locale

    @locale.setter
    def locale(self, value: Locale) -> None:
        self.translate.locale = value

    def text(self, key: str) -> str | None:
        return self.translate(key)

    def say(self, key: str, style: str | None = None) -> None:
        text = self.text(key)
        if text is not None:
            self.io.write_line(text, style=style)

    def option(self, key: str) -> None:
        """Print one numbered menu entry."""
        self.io.write_line("\t" + (self.text(key) or ""))

    def ask(self, key: str, secret: bool = False) -> str:
        prompt = self.text(key) or ""
        if not prompt.endswith(" "):
            prompt += " "
        return self.io.read_line(prompt, secret=secret)

    @classmethod
    def create(
        cls,
        backend: DeviceBackend,
        config: ConsoleConfig | None = None,
        io: ConsoleIO | None = None,
    ) -> WorkflowContext:
        config = config or ConsoleConfig()
        io = io or ConsoleIO()
        translate = Translator(StringCatalog(config.strings_dirs))
        return cls(
            session=DeviceSession(backend),
            io=io,
            translate=translate,
            sink=MessageSink(io, translate),
            config=config,
        )
