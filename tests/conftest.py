"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from plcconsole.config import ConsoleConfig
from plcconsole.console.io import ConsoleIO
from plcconsole.device.models import (
    DeviceHandle,
    DeviceKind,
    ModuleInfo,
    OperationResult,
    ProtectionLevel,
    ScanEvent,
    ScanReport,
    Severity,
    TrustState,
)
from plcconsole.device.simulated import SimulatedBackend, load_simulation_from_string
from plcconsole.workflow import WorkflowContext, WorkflowEngine
from plcconsole.workflow.commands import CommandDispatcher

TEST_NETWORK = """
name: test-net
interfaces:
  - eth0
devices:
  - address: 192.168.1.1
    kind: cpu
    station_name: plc-test
    description: CPU 1511-1 PN
    article_number: 6ES7 511-1AK02-0AB0
    serial_number: S V-TEST0001
    hardware_number: "10"
    firmware_version: V2.9.4
    mac: 28-63-36-00-00-01
    tia_version: V17
    operating_mode: run
    modules:
      - name: DI 16x24VDC_1
        description: DI 16x24VDC HF
        slot: "2"
        configuration: OK
    firmware:
      /fw/good.upd: V3.1.0
  - address: 192.168.1.2
    description: CPU 1515-2 PN
    trust_required: true
  - address: 192.168.1.3
    description: CPU 1516-3 PN/DP
    password: secret
  - address: 192.168.1.4
    description: CPU 1214C
    password: viewer
    protection_level: read
  - address: 192.168.1.5
    description: CPU 1517-3 PN
    trust_required: true
    password: secret
  - address: 192.168.1.10
    kind: module
    description: IM 155-6 PN ST
"""


def make_io(script: str = "") -> tuple[ConsoleIO, StringIO]:
    """A ConsoleIO reading ``script`` and writing plain text to a buffer."""
    out = StringIO()
    console = Console(
        file=out, width=200, highlight=False, soft_wrap=True, color_system=None
    )
    return ConsoleIO(console=console, stdin=StringIO(script)), out


@pytest.fixture
def simulation() -> SimulatedBackend:
    return SimulatedBackend(load_simulation_from_string(TEST_NETWORK))


@pytest.fixture
def network_file(tmp_path: Path) -> Path:
    path = tmp_path / "network.yaml"
    path.write_text(TEST_NETWORK)
    return path


@pytest.fixture
def make_engine() -> Callable[..., tuple[WorkflowEngine, StringIO]]:
    def _make(
        backend: object,
        script: str = "",
        dispatcher: CommandDispatcher | None = None,
    ) -> tuple[WorkflowEngine, StringIO]:
        io, out = make_io(script)
        ctx = WorkflowContext.create(backend, config=ConsoleConfig(), io=io)
        return WorkflowEngine(ctx, dispatcher), out

    return _make


@pytest.fixture
def device_handle() -> DeviceHandle:
    return DeviceHandle(
        device_id="dev-1",
        kind=DeviceKind.CPU,
        description="CPU 1511-1 PN",
        serial_number="S V-MOCK0001",
        ip="192.168.1.1",
        modules=[ModuleInfo(name="DI 16x24VDC_1", slot="2")],
    )


@pytest.fixture
def mock_backend(device_handle: DeviceHandle) -> MagicMock:
    """A backend double where every check passes and every call succeeds."""
    backend = MagicMock()
    ok = OperationResult.ok("Success")
    backend.query_interfaces.return_value = (ok, ["eth0"])
    backend.set_interface.return_value = ok
    backend.insert_device.return_value = (
        ScanReport(events=(ScanEvent(Severity.SUCCESS, "Device inserted"),)),
        device_handle,
    )
    backend.identity_changed.return_value = False
    backend.trust_required.return_value = False
    backend.trust_state.return_value = TrustState.NOT_REQUIRED
    backend.password_required.return_value = False
    backend.password_valid.return_value = True
    backend.protection_level.return_value = ProtectionLevel.FULL
    for name in (
        "identify",
        "refresh_status",
        "set_trust",
        "set_password",
        "set_operating_state",
        "set_address",
        "set_name",
        "set_firmware_file",
        "update_firmware",
    ):
        getattr(backend, name).return_value = ok
    return backend


@pytest.fixture
def make_context(mock_backend: MagicMock) -> Callable[..., tuple[WorkflowContext, StringIO]]:
    """Context already connected to the mock backend's device."""

    def _make(script: str = "") -> tuple[WorkflowContext, StringIO]:
        io, out = make_io(script)
        ctx = WorkflowContext.create(mock_backend, config=ConsoleConfig(), io=io)
        ctx.session.connect(0xC0A80101)
        return ctx, out

    return _make


@pytest.fixture
def console_io() -> Callable[[str], tuple[ConsoleIO, StringIO]]:
    return make_io
