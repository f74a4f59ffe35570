"""Exception hierarchy shared across the console."""

from __future__ import annotations


class ConsoleError(Exception):
    """Base class for plcconsole errors."""


class InputClosed(ConsoleError):
    """The interactive input source reached end of file."""


class NotConnectedError(ConsoleError):
    """A device operation was requested before a device was connected."""


class BackendLoadError(ConsoleError):
    """The configured device-management backend could not be created."""


class SimulationError(ConsoleError):
    """A simulation document is malformed."""
