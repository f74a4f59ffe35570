"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "plcconsole"
    return Path.home() / ".config" / "plcconsole"


@dataclass
class ConsoleConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    backend: str = "simulated"
    simulation: str = "preset:demo"
    strings_dirs: list[Path] = field(default_factory=list)
    progress_step: int = 5
    verbose: bool = False

    @classmethod
    def load(cls) -> ConsoleConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_backend = os.environ.get("PLCCONSOLE_BACKEND")
        if env_backend:
            config.backend = env_backend

        env_simulation = os.environ.get("PLCCONSOLE_SIMULATION")
        if env_simulation:
            config.simulation = env_simulation
        else:
            user_simulation = config.config_dir / "simulation.yaml"
            if user_simulation.is_file():
                config.simulation = str(user_simulation)

        # Explicit strings dir wins over the one in the config dir
        env_strings = os.environ.get("PLCCONSOLE_STRINGS_DIR")
        if env_strings:
            config.strings_dirs.append(Path(env_strings))
        strings_dir = config.config_dir / "strings"
        if strings_dir.is_dir():
            config.strings_dirs.append(strings_dir)

        env_step = os.environ.get("PLCCONSOLE_PROGRESS_STEP")
        if env_step:
            step = int(env_step)
            if not 1 <= step <= 100:
                raise ValueError(f"PLCCONSOLE_PROGRESS_STEP must be 1..100, got {step}")
            config.progress_step = step

        env_verbose = os.environ.get("PLCCONSOLE_VERBOSE", "")
        config.verbose = env_verbose.strip().lower() in _TRUTHY

        return config
