"""Device-management backend protocol — the external collaborator boundary."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from plcconsole.device.models import (
    DeviceHandle,
    OperatingState,
    OperationResult,
    ProgressEvent,
    ProtectionLevel,
    ScanReport,
    TrustState,
)

ProgressCallback = Callable[[ProgressEvent], None]


class DeviceBackend(Protocol):
    """Operations the console needs from a device-management service.

    Address arguments are pre-validated 32-bit values. Implementations own
    transport, timeouts and credential encryption.
    """

    def query_interfaces(self) -> tuple[OperationResult, list[str]]: ...

    def set_interface(self, name: str) -> OperationResult: ...

    def insert_device(
        self, address: int, router: int | None, credential: str
    ) -> tuple[ScanReport, DeviceHandle | None]: ...

    def release_device(self, handle: DeviceHandle) -> None: ...

    def identify(self, handle: DeviceHandle) -> OperationResult: ...

    def refresh_status(self, handle: DeviceHandle) -> OperationResult: ...

    def trust_required(self, handle: DeviceHandle) -> bool: ...

    def trust_state(self, handle: DeviceHandle) -> TrustState: ...

    def set_trust(self, handle: DeviceHandle, state: TrustState) -> OperationResult: ...

    def password_required(self, handle: DeviceHandle) -> bool: ...

    def set_password(self, handle: DeviceHandle, secret: str) -> OperationResult: ...

    def password_valid(self, handle: DeviceHandle) -> bool: ...

    def protection_level(self, handle: DeviceHandle) -> ProtectionLevel: ...

    def set_operating_state(
        self, handle: DeviceHandle, state: OperatingState
    ) -> OperationResult: ...

    def set_address(
        self, handle: DeviceHandle, ip: int, subnet: int, gateway: int
    ) -> OperationResult: ...

    def set_name(self, handle: DeviceHandle, name: str) -> OperationResult: ...

    def set_firmware_file(self, handle: DeviceHandle, path: str) -> OperationResult: ...

    def update_firmware(self, handle: DeviceHandle) -> OperationResult: ...

    def identity_changed(self, handle: DeviceHandle) -> bool: ...

    def add_progress_listener(
        self, handle: DeviceHandle, callback: ProgressCallback
    ) -> None: ...

    def remove_progress_listener(
        self, handle: DeviceHandle, callback: ProgressCallback
    ) -> None: ...
