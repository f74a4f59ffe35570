"""Device data models — results, handles, and the enums the workflow reads."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class DeviceKind(enum.Enum):
    """Capability tag carried by every device handle."""

    CPU = "cpu"
    MODULE = "module"
    OTHER = "other"


class TrustState(enum.Enum):
    """How the operator has treated the device's certificate."""

    NOT_REQUIRED = "not_required"
    ALWAYS = "always"
    NEVER = "never"
    SELECTION_NEEDED = "selection_needed"


class ProtectionLevel(enum.Enum):
    """Access level granted by the password currently set on the session."""

    FULL = "full"
    FAILSAFE = "failsafe"
    READ = "read"
    HMI = "hmi"
    NO_ACCESS = "no_access"


# Levels that allow this console's write operations
SUFFICIENT_PROTECTION = frozenset({ProtectionLevel.FULL, ProtectionLevel.FAILSAFE})


class OperatingState(enum.Enum):
    """Requested or reported run state of the controller."""

    RUN = "run"
    STOP = "stop"


class Severity(enum.Enum):
    """Severity of one entry in a scan report."""

    SUCCESS = "success"
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


class ProgressAction(enum.Enum):
    """Phase reported by a long-running device operation."""

    STARTING = "starting"
    DOWNLOADING = "downloading"
    UPDATING = "updating"
    PROCESSING = "processing"
    REBOOTING = "rebooting"
    FINISHED = "finished"


# Phases that advance the visible progress bar
COUNTED_PROGRESS_ACTIONS = frozenset(
    {
        ProgressAction.DOWNLOADING,
        ProgressAction.UPDATING,
        ProgressAction.PROCESSING,
        ProgressAction.REBOOTING,
    }
)


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a single device operation.

    ``code`` is an optional catalog key; when the catalog knows it the
    localized text replaces ``description``.
    """

    succeeded: bool
    description: str = ""
    code: str = ""
    warnings: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return not self.succeeded

    @classmethod
    def ok(
        cls, description: str = "", code: str = "", warnings: tuple[str, ...] = ()
    ) -> OperationResult:
        return cls(
            succeeded=True, description=description, code=code, warnings=warnings
        )

    @classmethod
    def error(cls, description: str, code: str = "") -> OperationResult:
        return cls(succeeded=False, description=description, code=code)


@dataclass(frozen=True)
class ScanEvent:
    """One entry of a scan report."""

    severity: Severity
    description: str
    code: str = ""


@dataclass(frozen=True)
class ScanReport:
    """Ordered events produced while inserting a device by address."""

    events: tuple[ScanEvent, ...] = ()

    @property
    def failed(self) -> bool:
        return any(e.severity is Severity.ERROR for e in self.events)


@dataclass(frozen=True)
class ModuleInfo:
    """A local module plugged into the controller's rack."""

    name: str
    description: str = ""
    slot: str = ""
    configuration: str = ""
    article_number: str = ""
    serial_number: str = ""
    hardware_number: str = ""
    firmware_version: str = ""


@dataclass
class DeviceHandle:
    """Live binding to one device, tagged with its kind.

    Fields are snapshots refreshed by the backend on ``refresh_status``.
    """

    device_id: str
    kind: DeviceKind
    description: str = ""
    article_number: str = ""
    serial_number: str = ""
    hardware_number: str = ""
    firmware_version: str = ""
    mac: str = ""
    ip: str = ""
    station_name: str = ""
    operating_mode: OperatingState = OperatingState.STOP
    tia_version: str = ""
    modules: list[ModuleInfo] = field(default_factory=list)


@dataclass(frozen=True)
class ProgressEvent:
    """Notification emitted during a long-running operation."""

    action: ProgressAction
    index: int
