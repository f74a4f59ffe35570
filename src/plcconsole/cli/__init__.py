"""CLI entry point — plcconsole [ADDRESS INTERFACE]."""

from __future__ import annotations

import logging

import click

from plcconsole import __version__
from plcconsole.config import ConsoleConfig
from plcconsole.device.loader import load_backend
from plcconsole.errors import BackendLoadError
from plcconsole.workflow import WorkflowContext, WorkflowEngine


@click.command()
@click.version_option(version=__version__, prog_name="plcconsole")
@click.argument("address", required=False)
@click.argument("interface", type=int, required=False)
def main(address: str | None, interface: int | None) -> None:
    """plcconsole — operator console for a network-attached controller.

    With no arguments the console is fully interactive. Given ADDRESS and
    the 1-based INTERFACE number it connects straight away and exits if
    that fails.
    """
    try:
        config = ConsoleConfig.load()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    level = logging.DEBUG if config.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if address is not None and interface is None:
        raise click.UsageError("INTERFACE is required when ADDRESS is given.")

    try:
        backend = load_backend(config)
    except BackendLoadError as e:
        raise click.ClickException(str(e)) from e

    ctx = WorkflowContext.create(backend, config)
    WorkflowEngine(ctx).run(address, interface)
