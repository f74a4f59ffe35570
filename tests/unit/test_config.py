"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from plcconsole.config import ConsoleConfig

_ENV_VARS = (
    "PLCCONSOLE_BACKEND",
    "PLCCONSOLE_SIMULATION",
    "PLCCONSOLE_STRINGS_DIR",
    "PLCCONSOLE_PROGRESS_STEP",
    "PLCCONSOLE_VERBOSE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))


def test_defaults(tmp_path: Path):
    config = ConsoleConfig.load()
    assert config.config_dir == tmp_path / "plcconsole"
    assert config.backend == "simulated"
    assert config.simulation == "preset:demo"
    assert config.strings_dirs == []
    assert config.progress_step == 5
    assert not config.verbose


def test_environment_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("PLCCONSOLE_BACKEND", "vendor.api:create")
    monkeypatch.setenv("PLCCONSOLE_SIMULATION", "/srv/plant.yaml")
    monkeypatch.setenv("PLCCONSOLE_PROGRESS_STEP", "10")
    monkeypatch.setenv("PLCCONSOLE_VERBOSE", "Yes")

    config = ConsoleConfig.load()
    assert config.backend == "vendor.api:create"
    assert config.simulation == "/srv/plant.yaml"
    assert config.progress_step == 10
    assert config.verbose


def test_files_in_config_dir(monkeypatch, tmp_path: Path):
    config_dir = tmp_path / "plcconsole"
    (config_dir / "strings").mkdir(parents=True)
    (config_dir / "simulation.yaml").write_text("name: mine\n")
    extra = tmp_path / "extra-strings"
    monkeypatch.setenv("PLCCONSOLE_STRINGS_DIR", str(extra))

    config = ConsoleConfig.load()
    assert config.simulation == str(config_dir / "simulation.yaml")
    assert config.strings_dirs == [extra, config_dir / "strings"]


@pytest.mark.parametrize("value", ["0", "101", "five"])
def test_invalid_progress_step(monkeypatch, value):
    monkeypatch.setenv("PLCCONSOLE_PROGRESS_STEP", value)
    with pytest.raises(ValueError):
        ConsoleConfig.load()
