"""Device session — the single target binding the workflow operates on."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from plcconsole.addressing import format_address
from plcconsole.device.backend import DeviceBackend, ProgressCallback
from plcconsole.device.models import (
    SUFFICIENT_PROTECTION,
    DeviceHandle,
    DeviceKind,
    OperatingState,
    OperationResult,
    ProtectionLevel,
    ScanReport,
    TrustState,
)
from plcconsole.errors import NotConnectedError

logger = logging.getLogger(__name__)

# The vendor API expects a credential on insert; the real one is set later
CREDENTIAL_PLACEHOLDER = "******"


class DeviceSession:
    """Wraps a device backend: interface choice, target address, device handle.

    One instance lives for the whole process. ``connect`` re-targets it and
    ``release`` drops the handle so nothing can reach a rejected device.
    """

    def __init__(self, backend: DeviceBackend) -> None:
        self._backend = backend
        self._interface: str | None = None
        self._address: int | None = None
        self._handle: DeviceHandle | None = None

    @property
    def interface(self) -> str | None:
        return self._interface

    @property
    def address(self) -> int | None:
        return self._address

    @property
    def handle(self) -> DeviceHandle | None:
        return self._handle

    @property
    def connected(self) -> bool:
        return self._handle is not None

    def _require_handle(self) -> DeviceHandle:
        if self._handle is None:
            raise NotConnectedError("No device connected — call connect() first")
        return self._handle

    # --- Network interface ---

    def list_interfaces(self) -> tuple[OperationResult, list[str]]:
        result, names = self._backend.query_interfaces()
        logger.debug("Interfaces: %s (succeeded=%s)", names, result.succeeded)
        return result, list(names)

    def select_interface(self, name: str) -> OperationResult:
        result = self._backend.set_interface(name)
        if result.succeeded:
            self._interface = name
            logger.info("Selected network interface '%s'", name)
        return result

    # --- Target ---

    def connect(self, address: int, router: int | None = None) -> ScanReport:
        """Insert the device at ``address`` and bind to it.

        Any previous target is discarded first, even if the insert fails.
        """
        self.release()
        self._address = address
        report, handle = self._backend.insert_device(
            address, router, CREDENTIAL_PLACEHOLDER
        )
        if report.failed:
            logger.info("Connect to %s failed", format_address(address))
            return report
        self._handle = handle
        logger.info(
            "Connected to %s (%s)",
            format_address(address),
            handle.kind.value if handle is not None else "no handle",
        )
        return report

    def release(self) -> None:
        """Forget the current device and target address."""
        if self._handle is not None:
            logger.debug("Releasing device %s", self._handle.device_id)
            self._backend.release_device(self._handle)
        self._handle = None
        self._address = None

    @property
    def is_supported_kind(self) -> bool:
        return self._handle is not None and self._handle.kind is DeviceKind.CPU

    # --- Capability predicates ---

    @property
    def identity_changed(self) -> bool:
        return self._backend.identity_changed(self._require_handle())

    @property
    def trust_required(self) -> bool:
        return self._backend.trust_required(self._require_handle())

    @property
    def trust_state(self) -> TrustState:
        return self._backend.trust_state(self._require_handle())

    @property
    def password_required(self) -> bool:
        return self._backend.password_required(self._require_handle())

    @property
    def password_valid(self) -> bool:
        return self._backend.password_valid(self._require_handle())

    @property
    def protection_level(self) -> ProtectionLevel:
        return self._backend.protection_level(self._require_handle())

    @property
    def has_sufficient_access(self) -> bool:
        return self.protection_level in SUFFICIENT_PROTECTION

    # --- Operations ---

    def set_trust(self, state: TrustState) -> OperationResult:
        logger.debug("Setting certificate trust to %s", state.value)
        return self._backend.set_trust(self._require_handle(), state)

    def set_password(self, secret: str) -> OperationResult:
        return self._backend.set_password(self._require_handle(), secret)

    def identify(self) -> OperationResult:
        return self._backend.identify(self._require_handle())

    def refresh_status(self) -> OperationResult:
        return self._backend.refresh_status(self._require_handle())

    def set_operating_state(self, state: OperatingState) -> OperationResult:
        logger.debug("Requesting operating state %s", state.value)
        return self._backend.set_operating_state(self._require_handle(), state)

    def set_address(self, ip: int, subnet: int, gateway: int) -> OperationResult:
        logger.debug(
            "Setting address %s/%s via %s",
            format_address(ip),
            format_address(subnet),
            format_address(gateway),
        )
        return self._backend.set_address(self._require_handle(), ip, subnet, gateway)

    def set_name(self, name: str) -> OperationResult:
        return self._backend.set_name(self._require_handle(), name)

    def set_firmware_file(self, path: str) -> OperationResult:
        return self._backend.set_firmware_file(self._require_handle(), path)

    def update_firmware(self) -> OperationResult:
        return self._backend.update_firmware(self._require_handle())

    @contextmanager
    def progress_listener(self, callback: ProgressCallback) -> Iterator[None]:
        """Subscribe ``callback`` to progress events for the block's duration."""
        handle = self._require_handle()
        self._backend.add_progress_listener(handle, callback)
        try:
            yield
        finally:
            self._backend.remove_progress_listener(handle, callback)
