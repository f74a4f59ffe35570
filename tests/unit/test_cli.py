"""Tests for the CLI entry point using Click's CliRunner."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from plcconsole.cli import main


@pytest.fixture
def env(tmp_path: Path, network_file: Path) -> dict[str, str | None]:
    return {
        "XDG_CONFIG_HOME": str(tmp_path),
        "PLCCONSOLE_SIMULATION": str(network_file),
        "PLCCONSOLE_BACKEND": None,
        "PLCCONSOLE_PROGRESS_STEP": None,
        "PLCCONSOLE_STRINGS_DIR": None,
        "PLCCONSOLE_VERBOSE": None,
    }


def test_main_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "ADDRESS" in result.output
    assert "INTERFACE" in result.output


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_interactive_session(env):
    runner = CliRunner()
    result = runner.invoke(main, [], input="2\n1\n192.168.1.1\n\n9\n", env=env)
    assert result.exit_code == 0
    assert "Controller Configuration Console" in result.output
    assert "Device Type: CPU 1511-1 PN" in result.output


def test_end_of_input_exits_cleanly(env):
    runner = CliRunner()
    result = runner.invoke(main, [], input="2\n", env=env)
    assert result.exit_code == 0


def test_headless_start(env):
    runner = CliRunner()
    result = runner.invoke(main, ["192.168.1.1", "1"], input="9\n", env=env)
    assert result.exit_code == 0
    assert "Language Selection" not in result.output
    assert "Serial Number: S V-TEST0001" in result.output


def test_headless_failure_exits_without_prompting(env):
    runner = CliRunner()
    result = runner.invoke(main, ["10.9.9.9", "1"], input="", env=env)
    assert result.exit_code == 0
    assert "No device responded" in result.output
    assert "Command:" not in result.output


def test_address_without_interface_is_usage_error(env):
    runner = CliRunner()
    result = runner.invoke(main, ["192.168.1.1"], env=env)
    assert result.exit_code == 2


def test_no_interfaces(env, tmp_path: Path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("name: empty\n")
    env["PLCCONSOLE_SIMULATION"] = str(empty)

    runner = CliRunner()
    result = runner.invoke(main, [], input="2\n", env=env)
    assert result.exit_code == 0
    assert "No network interfaces were found" in result.output


def test_missing_simulation_file(env, tmp_path: Path):
    env["PLCCONSOLE_SIMULATION"] = str(tmp_path / "missing.yaml")
    runner = CliRunner()
    result = runner.invoke(main, [], env=env)
    assert result.exit_code == 1
    assert "Cannot load simulation" in result.output


def test_bad_backend_reference(env):
    env["PLCCONSOLE_BACKEND"] = "no_such_module_xyz:create"
    runner = CliRunner()
    result = runner.invoke(main, [], env=env)
    assert result.exit_code == 1
    assert "Cannot import backend module" in result.output


def test_invalid_progress_step(env):
    env["PLCCONSOLE_PROGRESS_STEP"] = "0"
    runner = CliRunner()
    result = runner.invoke(main, [], env=env)
    assert result.exit_code == 1
    assert "PLCCONSOLE_PROGRESS_STEP" in result.output


@pytest.mark.parametrize(
    "document",
    [
        "name: broken\ninterfaces:\n  - eth0\ndevices: 3\n",
        "name: broken\ninterfaces: eth0\n",
        "name: broken\ndevices:\n  - address: 10.0.0.1\n    firmware: [/fw/a.upd]\n",
        "name: broken\ndevices: [unclosed\n",
    ],
)
def test_malformed_simulation_file(env, tmp_path: Path, document):
    broken = tmp_path / "broken.yaml"
    broken.write_text(document)
    env["PLCCONSOLE_SIMULATION"] = str(broken)

    runner = CliRunner()
    result = runner.invoke(main, [], env=env)
    assert result.exit_code == 1
    assert "Cannot load simulation" in result.output


def test_null_sections_load_as_empty(env, tmp_path: Path):
    bare = tmp_path / "bare.yaml"
    bare.write_text("name: bare\ninterfaces:\ndevices:\n")
    env["PLCCONSOLE_SIMULATION"] = str(bare)

    runner = CliRunner()
    result = runner.invoke(main, [], input="2\n", env=env)
    assert result.exit_code == 0
    assert "No network interfaces were found" in result.output
