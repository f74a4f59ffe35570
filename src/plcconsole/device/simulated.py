"""Simulated device-management backend driven by a YAML network description.

Stands in for the vendor service so the console can run without hardware.
Tests use the ``swap_device`` / ``reset_certificate`` / ``change_password``
hooks to mimic out-of-band changes made by a third party.
"""

from __future__ import annotations

import importlib.resources
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

from plcconsole.addressing import format_address, parse_address
from plcconsole.device.backend import ProgressCallback
from plcconsole.device.models import (
    DeviceHandle,
    DeviceKind,
    ModuleInfo,
    OperatingState,
    OperationResult,
    ProgressAction,
    ProgressEvent,
    ProtectionLevel,
    ScanEvent,
    ScanReport,
    Severity,
    TrustState,
)
from plcconsole.errors import SimulationError

logger = logging.getLogger(__name__)

_PRESET_PREFIX = "preset:"

# Station names follow DNS label rules
_STATION_NAME_RE = re.compile(r"^[a-z0-9]([a-z0-9.-]{0,238}[a-z0-9])?$")

# (upper bound, phase) pairs walked by a simulated firmware update
_FIRMWARE_PHASES = (
    (40, ProgressAction.DOWNLOADING),
    (80, ProgressAction.UPDATING),
    (95, ProgressAction.PROCESSING),
    (100, ProgressAction.REBOOTING),
)


@dataclass
class SimulatedDevice:
    """One device reachable on the simulated network."""

    address: int
    kind: DeviceKind = DeviceKind.CPU
    station_name: str = ""
    description: str = ""
    article_number: str = ""
    serial_number: str = ""
    hardware_number: str = ""
    firmware_version: str = ""
    mac: str = ""
    tia_version: str = ""
    operating_mode: OperatingState = OperatingState.STOP
    trust_required: bool = False
    password: str | None = None
    protection_level: ProtectionLevel = ProtectionLevel.FULL
    subnet: int = 0xFFFFFF00
    gateway: int = 0
    modules: list[ModuleInfo] = field(default_factory=list)
    firmware: dict[str, str] = field(default_factory=dict)
    warnings: dict[str, tuple[str, ...]] = field(default_factory=dict)
    generation: int = 0


@dataclass
class SimulatedNetwork:
    """Interfaces and devices parsed from a simulation document."""

    name: str
    interfaces: list[str] = field(default_factory=list)
    devices: list[SimulatedDevice] = field(default_factory=list)


@dataclass
class _Binding:
    """Per-handle state the vendor service keeps for an inserted device."""

    device: SimulatedDevice
    generation: int
    trust: TrustState
    password: str | None = None
    firmware_file: str | None = None
    listeners: list[ProgressCallback] = field(default_factory=list)


class SimulatedBackend:
    """In-memory implementation of the DeviceBackend protocol."""

    def __init__(self, network: SimulatedNetwork) -> None:
        self._network = network
        self._interface: str | None = None
        self._bindings: dict[str, _Binding] = {}
        self._next_id = 1

    @classmethod
    def from_source(cls, source: str | Path) -> SimulatedBackend:
        """Build from a file path or a ``preset:<name>`` reference."""
        ref = str(source)
        if ref.startswith(_PRESET_PREFIX):
            network = _load_preset(ref[len(_PRESET_PREFIX) :], set())
        else:
            network = load_simulation(ref)
        return cls(network)

    @property
    def network(self) -> SimulatedNetwork:
        return self._network

    # --- Network interface ---

    def query_interfaces(self) -> tuple[OperationResult, list[str]]:
        return _ok(), list(self._network.interfaces)

    def set_interface(self, name: str) -> OperationResult:
        if name not in self._network.interfaces:
            return OperationResult.error(
                f"Unknown network interface: {name}", code="resultUnknownInterface"
            )
        self._interface = name
        return _ok()

    # --- Insert ---

    def insert_device(
        self, address: int, router: int | None, credential: str
    ) -> tuple[ScanReport, DeviceHandle | None]:
        if self._interface is None:
            return _scan_error("No network interface selected", "resultNoInterface"), None
        device = self._find(address)
        if device is None:
            logger.debug("No simulated device at %s", format_address(address))
            return _scan_error(
                f"No device found at {format_address(address)}",
                "resultDeviceNotFound",
            ), None

        handle = DeviceHandle(device_id=f"sim-{self._next_id}", kind=device.kind)
        self._next_id += 1
        trust = (
            TrustState.SELECTION_NEEDED
            if device.trust_required
            else TrustState.NOT_REQUIRED
        )
        self._bindings[handle.device_id] = _Binding(
            device=device, generation=device.generation, trust=trust
        )
        _copy_status(device, handle)

        events = [ScanEvent(Severity.SUCCESS, "Device inserted", "resultDeviceInserted")]
        if router is not None:
            events.insert(
                0,
                ScanEvent(
                    Severity.INFORMATION,
                    f"Routed through {format_address(router)}",
                    "resultRouted",
                ),
            )
        return ScanReport(events=tuple(events)), handle

    def release_device(self, handle: DeviceHandle) -> None:
        binding = self._bindings.pop(handle.device_id, None)
        if binding is not None:
            binding.listeners.clear()

    # --- Predicates ---

    def identity_changed(self, handle: DeviceHandle) -> bool:
        binding = self._binding(handle)
        current = self._find(binding.device.address)
        return current is not binding.device or binding.generation != current.generation

    def trust_required(self, handle: DeviceHandle) -> bool:
        return self._binding(handle).device.trust_required

    def trust_state(self, handle: DeviceHandle) -> TrustState:
        binding = self._binding(handle)
        if not binding.device.trust_required:
            return TrustState.NOT_REQUIRED
        return binding.trust

    def password_required(self, handle: DeviceHandle) -> bool:
        return self._binding(handle).device.password is not None

    def password_valid(self, handle: DeviceHandle) -> bool:
        binding = self._binding(handle)
        return binding.password is not None and binding.password == binding.device.password

    def protection_level(self, handle: DeviceHandle) -> ProtectionLevel:
        binding = self._binding(handle)
        if binding.device.password is None:
            return ProtectionLevel.FULL
        if not self.password_valid(handle):
            return ProtectionLevel.NO_ACCESS
        return binding.device.protection_level

    # --- Operations ---

    def set_trust(self, handle: DeviceHandle, state: TrustState) -> OperationResult:
        self._binding(handle).trust = state
        return _ok()

    def set_password(self, handle: DeviceHandle, secret: str) -> OperationResult:
        binding = self._binding(handle)
        binding.password = secret
        if binding.device.password is not None and secret != binding.device.password:
            return OperationResult.error("Invalid password", code="resultInvalidPassword")
        return self._result(binding, "set_password")

    def identify(self, handle: DeviceHandle) -> OperationResult:
        binding = self._binding(handle)
        blocked = self._blocked(handle, write=False)
        if blocked is not None:
            return blocked
        return self._result(binding, "identify")

    def refresh_status(self, handle: DeviceHandle) -> OperationResult:
        binding = self._binding(handle)
        blocked = self._blocked(handle, write=False)
        if blocked is not None:
            return blocked
        _copy_status(binding.device, handle)
        return self._result(binding, "refresh_status")

    def set_operating_state(
        self, handle: DeviceHandle, state: OperatingState
    ) -> OperationResult:
        binding = self._binding(handle)
        blocked = self._blocked(handle, write=True)
        if blocked is not None:
            return blocked
        binding.device.operating_mode = state
        return self._result(binding, "set_operating_state")

    def set_address(
        self, handle: DeviceHandle, ip: int, subnet: int, gateway: int
    ) -> OperationResult:
        binding = self._binding(handle)
        blocked = self._blocked(handle, write=True)
        if blocked is not None:
            return blocked
        other = self._find(ip)
        if other is not None and other is not binding.device:
            return OperationResult.error(
                f"Address {format_address(ip)} is already in use",
                code="resultAddressInUse",
            )
        binding.device.address = ip
        binding.device.subnet = subnet
        binding.device.gateway = gateway
        return self._result(binding, "set_address")

    def set_name(self, handle: DeviceHandle, name: str) -> OperationResult:
        binding = self._binding(handle)
        blocked = self._blocked(handle, write=True)
        if blocked is not None:
            return blocked
        if not _STATION_NAME_RE.match(name):
            return OperationResult.error(
                f"Invalid station name: {name!r}", code="resultInvalidStationName"
            )
        binding.device.station_name = name
        return self._result(binding, "set_name")

    def set_firmware_file(self, handle: DeviceHandle, path: str) -> OperationResult:
        binding = self._binding(handle)
        if path not in binding.device.firmware:
            return OperationResult.error(
                f"Invalid firmware file: {path}", code="resultInvalidFirmwareFile"
            )
        binding.firmware_file = path
        return _ok()

    def update_firmware(self, handle: DeviceHandle) -> OperationResult:
        binding = self._binding(handle)
        blocked = self._blocked(handle, write=True)
        if blocked is not None:
            return blocked
        if binding.firmware_file is None:
            return OperationResult.error(
                "No firmware file selected", code="resultInvalidFirmwareFile"
            )

        index = 0
        self._notify(binding, ProgressEvent(ProgressAction.STARTING, 0))
        for upper, action in _FIRMWARE_PHASES:
            while index <= upper:
                self._notify(binding, ProgressEvent(action, index))
                index += 1
        self._notify(binding, ProgressEvent(ProgressAction.FINISHED, 100))

        binding.device.firmware_version = binding.device.firmware[binding.firmware_file]
        binding.firmware_file = None
        return self._result(binding, "update_firmware")

    def add_progress_listener(
        self, handle: DeviceHandle, callback: ProgressCallback
    ) -> None:
        self._binding(handle).listeners.append(callback)

    def remove_progress_listener(
        self, handle: DeviceHandle, callback: ProgressCallback
    ) -> None:
        self._binding(handle).listeners.remove(callback)

    # --- Out-of-band changes ---

    def swap_device(self, address: int, **changes: object) -> None:
        """Replace the device at ``address`` with a different unit."""
        device = self._require_device(address)
        device.generation += 1
        for key, value in changes.items():
            setattr(device, key, value)
        logger.debug("Swapped device at %s", format_address(address))

    def reset_certificate(self, address: int) -> None:
        """Force every binding to the device to re-decide certificate trust."""
        device = self._require_device(address)
        device.trust_required = True
        for binding in self._bindings.values():
            if binding.device is device:
                binding.trust = TrustState.SELECTION_NEEDED

    def change_password(self, address: int, password: str | None) -> None:
        """Change the device password behind the console's back."""
        self._require_device(address).password = password

    # --- Internals ---

    def _binding(self, handle: DeviceHandle) -> _Binding:
        try:
            return self._bindings[handle.device_id]
        except KeyError:
            raise SimulationError(f"Unknown device handle: {handle.device_id}") from None

    def _find(self, address: int) -> SimulatedDevice | None:
        for device in self._network.devices:
            if device.address == address:
                return device
        return None

    def _require_device(self, address: int) -> SimulatedDevice:
        device = self._find(address)
        if device is None:
            raise SimulationError(f"No simulated device at {format_address(address)}")
        return device

    def _blocked(self, handle: DeviceHandle, write: bool) -> OperationResult | None:
        if self.trust_state(handle) in (TrustState.NEVER, TrustState.SELECTION_NEEDED):
            return OperationResult.error(
                "Communications disabled", code="resultCommunicationsDisabled"
            )
        if write and self.protection_level(handle) not in (
            ProtectionLevel.FULL,
            ProtectionLevel.FAILSAFE,
        ):
            return OperationResult.error("Access denied", code="resultAccessDenied")
        return None

    def _result(self, binding: _Binding, operation: str) -> OperationResult:
        return _ok(warnings=binding.device.warnings.get(operation, ()))

    def _notify(self, binding: _Binding, event: ProgressEvent) -> None:
        for callback in list(binding.listeners):
            callback(event)


def _ok(warnings: tuple[str, ...] = ()) -> OperationResult:
    return OperationResult.ok("Success", code="resultSuccess", warnings=warnings)


def _scan_error(description: str, code: str) -> ScanReport:
    return ScanReport(events=(ScanEvent(Severity.ERROR, description, code),))


def _copy_status(device: SimulatedDevice, handle: DeviceHandle) -> None:
    handle.description = device.description
    handle.article_number = device.article_number
    handle.serial_number = device.serial_number
    handle.hardware_number = device.hardware_number
    handle.firmware_version = device.firmware_version
    handle.mac = device.mac
    handle.ip = format_address(device.address)
    handle.station_name = device.station_name
    handle.operating_mode = device.operating_mode
    handle.tia_version = device.tia_version
    handle.modules = [replace(m) for m in device.modules]


# --- YAML loading ---


def load_simulation(path: str | Path, _resolved: set[str] | None = None) -> SimulatedNetwork:
    """Load a simulated network from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    resolved = _resolved if _resolved is not None else set()
    return _build_network(_parse_yaml(text), resolved)


def load_simulation_from_string(text: str) -> SimulatedNetwork:
    """Parse a YAML string into a SimulatedNetwork, resolving inheritance."""
    return _build_network(_parse_yaml(text), _resolved=set())


def _parse_yaml(text: str) -> dict:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SimulationError(f"Invalid simulation YAML: {e}") from e
    if not isinstance(data, dict):
        raise SimulationError("Simulation YAML must be a mapping")
    return data


def _get_list(data: dict, key: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise SimulationError(f"'{key}' must be a list")
    return value


def _get_mapping(data: dict, key: str) -> dict:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise SimulationError(f"'{key}' must be a mapping")
    return value


def _build_network(data: dict, _resolved: set[str]) -> SimulatedNetwork:
    name = str(data.get("name") or "unnamed")

    if name in _resolved:
        raise SimulationError(f"Circular simulation inheritance detected: {name}")
    _resolved.add(name)

    interfaces = [str(i) for i in _get_list(data, "interfaces")]
    devices = [_parse_device(d) for d in _get_list(data, "devices")]

    inherit_list = data.get("inherit") or []
    if isinstance(inherit_list, str):
        inherit_list = [inherit_list]
    if not isinstance(inherit_list, list) or not all(
        isinstance(ref, str) for ref in inherit_list
    ):
        raise SimulationError("'inherit' must be a reference or a list of references")

    # Own entries first; inherited ones only fill addresses not yet taken
    for ref in inherit_list:
        parent = _load_ref(ref, _resolved)
        interfaces.extend(i for i in parent.interfaces if i not in interfaces)
        taken = {d.address for d in devices}
        devices.extend(d for d in parent.devices if d.address not in taken)

    return SimulatedNetwork(name=name, interfaces=interfaces, devices=devices)


def _parse_device(data: object) -> SimulatedDevice:
    if not isinstance(data, dict):
        raise SimulationError("Each device entry must be a mapping")

    address = _parse_required_address(data, "address")
    try:
        kind = DeviceKind(data.get("kind", "cpu"))
        operating_mode = OperatingState(data.get("operating_mode", "stop"))
        protection = ProtectionLevel(data.get("protection_level", "full"))
    except ValueError as e:
        raise SimulationError(str(e)) from e

    password = data.get("password")
    warnings: dict[str, tuple[str, ...]] = {}
    for operation, raw in _get_mapping(data, "warnings").items():
        # A single warning may be written without a list
        texts = raw if isinstance(raw, list) else [raw]
        warnings[str(operation)] = tuple(str(w) for w in texts)

    return SimulatedDevice(
        address=address,
        kind=kind,
        station_name=str(data.get("station_name", "")),
        description=str(data.get("description", "")),
        article_number=str(data.get("article_number", "")),
        serial_number=str(data.get("serial_number", "")),
        hardware_number=str(data.get("hardware_number", "")),
        firmware_version=str(data.get("firmware_version", "")),
        mac=str(data.get("mac", "")),
        tia_version=str(data.get("tia_version", "")),
        operating_mode=operating_mode,
        trust_required=bool(data.get("trust_required", False)),
        password=str(password) if password is not None else None,
        protection_level=protection,
        subnet=_parse_optional_address(data, "subnet", 0xFFFFFF00),
        gateway=_parse_optional_address(data, "gateway", 0),
        modules=[_parse_module(m) for m in _get_list(data, "modules")],
        firmware={str(k): str(v) for k, v in _get_mapping(data, "firmware").items()},
        warnings=warnings,
    )


def _parse_module(data: object) -> ModuleInfo:
    if not isinstance(data, dict):
        raise SimulationError("Each module entry must be a mapping")
    return ModuleInfo(
        name=str(data.get("name", "")),
        description=str(data.get("description", "")),
        slot=str(data.get("slot", "")),
        configuration=str(data.get("configuration", "")),
        article_number=str(data.get("article_number", "")),
        serial_number=str(data.get("serial_number", "")),
        hardware_number=str(data.get("hardware_number", "")),
        firmware_version=str(data.get("firmware_version", "")),
    )


def _parse_required_address(data: dict, key: str) -> int:
    raw = data.get(key)
    if raw is None:
        raise SimulationError(f"Device entry is missing '{key}'")
    value = parse_address(str(raw))
    if value is None:
        raise SimulationError(f"Invalid {key}: {raw}")
    return value


def _parse_optional_address(data: dict, key: str, default: int) -> int:
    if data.get(key) is None:
        return default
    return _parse_required_address(data, key)


def _load_ref(ref: str, _resolved: set[str]) -> SimulatedNetwork:
    if ref.startswith(_PRESET_PREFIX):
        return _load_preset(ref[len(_PRESET_PREFIX) :], _resolved)
    return load_simulation(ref, _resolved=_resolved)


def _load_preset(name: str, _resolved: set[str]) -> SimulatedNetwork:
    filename = f"{name}.yaml"
    pkg = importlib.resources.files("plcconsole.device.presets")
    resource = pkg.joinpath(filename)
    try:
        text = resource.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SimulationError(f"Unknown simulation preset: {name}") from None
    return _build_network(_parse_yaml(text), _resolved)
