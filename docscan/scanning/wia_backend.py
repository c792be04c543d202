import re
from pathlib import Path
from typing import ClassVar

from docscan.scanning.base import BaseScannerBackend
from docscan.scanning.models import Backend, DeviceDescriptor, ScanOptions


class WiaBackend(BaseScannerBackend):
    """Windows Image Acquisition scanners through ``wia-cmd-scanner``."""

    backend: ClassVar[Backend] = Backend.WIA

    # wia-cmd-scanner list prints: Canon LiDE 300 ({6BDD1FC6-...}\0001) [offline]
    _DEVICE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^(?P<name>.+?)\s+\((?P<id>[^()]+)\)(?P<offline>\s*\[offline\])?\s*$",
        re.IGNORECASE,
    )

    def __init__(self, command: str = "wia-cmd-scanner") -> None:
        super().__init__(command)

    def list_command(self) -> list[str]:
        return [self._command, "list"]

    def parse_devices(self, output: str) -> list[DeviceDescriptor]:
        devices = []
        for line in output.splitlines():
            match = self._DEVICE_RE.match(line.strip())
            if match:
                devices.append(
                    DeviceDescriptor(
                        id=match.group("id").strip(),
                        display_name=match.group("name").strip(),
                        backend=self.backend,
                        available=match.group("offline") is None,
                    )
                )
        return devices

    def capture_command(
        self,
        device_id: str,
        options: ScanOptions,
        output_path: Path,
    ) -> list[str]:
        return [
            self._command,
            "scan",
            device_id,
            "--output",
            str(output_path),
            "--resolution",
            str(options.resolution_dpi),
        ]

    def reports_missing_device(self, stderr: str) -> bool:
        lowered = stderr.lower()
        return "device not found" in lowered or "no such device" in lowered
