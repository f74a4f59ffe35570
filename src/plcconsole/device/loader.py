"""Resolve the configured device-management backend."""

from __future__ import annotations

import importlib
import logging

from plcconsole.config import ConsoleConfig
from plcconsole.device.backend import DeviceBackend
from plcconsole.device.simulated import SimulatedBackend
from plcconsole.errors import BackendLoadError, SimulationError

logger = logging.getLogger(__name__)

SIMULATED = "simulated"


def load_backend(config: ConsoleConfig) -> DeviceBackend:
    """Create the backend named by ``config.backend``.

    ``simulated`` builds the YAML-driven simulator from ``config.simulation``.
    Anything else must be ``package.module:factory``; the factory is called
    with the config and must return a DeviceBackend.
    """
    if config.backend == SIMULATED:
        try:
            backend = SimulatedBackend.from_source(config.simulation)
        except (OSError, SimulationError) as e:
            raise BackendLoadError(
                f"Cannot load simulation '{config.simulation}': {e}"
            ) from e
        logger.info("Using simulated backend from %s", config.simulation)
        return backend

    module_name, sep, attr = config.backend.partition(":")
    if not sep or not module_name or not attr:
        raise BackendLoadError(
            f"Backend must be '{SIMULATED}' or 'module:factory', got '{config.backend}'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise BackendLoadError(f"Cannot import backend module '{module_name}': {e}") from e
    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise BackendLoadError(f"'{config.backend}' is not a callable factory")

    logger.info("Using backend %s", config.backend)
    return factory(config)
