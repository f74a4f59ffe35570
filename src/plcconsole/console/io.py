"""Line-oriented console input/output."""

from __future__ import annotations

import sys
from typing import TextIO

from rich.console import Console

from plcconsole.errors import InputClosed


class ConsoleIO:
    """Prompts and reads trimmed lines; writes plain text through rich.

    Text is printed with markup disabled because localized strings and
    device data may contain square brackets. End of input raises
    ``InputClosed`` from any read.
    """

    def __init__(self, console: Console | None = None, stdin: TextIO | None = None) -> None:
        self._console = console or Console(highlight=False, soft_wrap=True)
        self._stdin = stdin if stdin is not None else sys.stdin

    @property
    def console(self) -> Console:
        return self._console

    def write_line(self, text: str | None = "", style: str | None = None) -> None:
        self._console.print(text or "", style=style, markup=False, highlight=False)

    def write(self, text: str | None, style: str | None = None) -> None:
        self._console.print(text or "", end="", style=style, markup=False, highlight=False)

    def read_line(self, prompt: str | None = "", secret: bool = False) -> str:
        """Show ``prompt`` and return the next input line, trimmed."""
        if secret and self._interactive():
            try:
                line = self._console.input(prompt or "", markup=False, password=True)
            except EOFError:
                raise InputClosed from None
            return line.strip()

        self.write(prompt)
        line = self._stdin.readline()
        if not line:
            raise InputClosed
        return line.strip()

    def _interactive(self) -> bool:
        try:
            return self._stdin.isatty()
        except ValueError:
            return False
