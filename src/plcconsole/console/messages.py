"""Message sink — renders device results and device data as console text."""

from __future__ import annotations

from plcconsole.console.io import ConsoleIO
from plcconsole.device.models import (
    DeviceHandle,
    ModuleInfo,
    OperationResult,
    ScanEvent,
    ScanReport,
    Severity,
)
from plcconsole.i18n import Translator

_SEVERITY_PREFIX = {
    Severity.SUCCESS: ("SUCCESS: ", "green"),
    Severity.INFORMATION: ("INFORMATION: ", "cyan"),
    Severity.WARNING: ("WARNING: ", "yellow"),
    Severity.ERROR: ("ERROR: ", "bold red"),
}


class MessageSink:
    """Turns results, scan reports and device snapshots into printed lines.

    Independent of workflow state; only the locale (via the translator)
    affects the output.
    """

    def __init__(self, io: ConsoleIO, translate: Translator) -> None:
        self._io = io
        self._translate = translate

    def result(self, result: OperationResult) -> None:
        """Print warnings newest first, then the success or error line."""
        for warning in reversed(result.warnings):
            self._line(Severity.WARNING, warning)
        severity = Severity.SUCCESS if result.succeeded else Severity.ERROR
        self._line(severity, self._describe(result.code, result.description))

    def scan_report(self, report: ScanReport) -> None:
        for event in reversed(report.events):
            self._event(event)

    def device_info(self, handle: DeviceHandle) -> None:
        rows = (
            ("deviceTypeLabel", handle.description),
            ("articleNumberLabel", handle.article_number),
            ("serialNumberLabel", handle.serial_number),
            ("hardwareNumberLabel", handle.hardware_number),
            ("firmwareVersionLabel", handle.firmware_version),
            ("macLabel", handle.mac),
            ("ipLabel", handle.ip),
            ("stationNameLabel", handle.station_name),
            ("operatingStateLabel", handle.operating_mode.value.upper()),
            ("tiaVersionLabel", handle.tia_version),
        )
        for key, value in rows:
            self._labelled(key, value)

    def module_info(self, module: ModuleInfo) -> None:
        self._io.write_line()
        rows = (
            ("nameLabel", module.name),
            ("deviceTypeLabel", module.description),
            ("slotLabel", module.slot),
            ("configurationLabel", module.configuration),
            ("articleNumberLabel", module.article_number),
            ("serialNumberLabel", module.serial_number),
            ("hardwareNumberLabel", module.hardware_number),
            ("firmwareVersionLabel", module.firmware_version),
        )
        for key, value in rows:
            self._labelled(key, value)

    def _event(self, event: ScanEvent) -> None:
        self._line(event.severity, self._describe(event.code, event.description))

    def _describe(self, code: str, description: str) -> str:
        if code:
            localized = self._translate(code)
            if localized is not None:
                return localized
        return description

    def _line(self, severity: Severity, text: str) -> None:
        prefix, style = _SEVERITY_PREFIX[severity]
        self._io.write_line(prefix + text, style=style)

    def _labelled(self, key: str, value: str) -> None:
        label = self._translate(key) or ""
        self._io.write_line(f"{label} {value}")
