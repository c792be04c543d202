import re
from pathlib import Path
from typing import ClassVar

from docscan.scanning.base import BaseScannerBackend
from docscan.scanning.models import Backend, ColorMode, DeviceDescriptor, ScanOptions


class SaneBackend(BaseScannerBackend):
    """POSIX scanners through SANE's ``scanimage``."""

    backend: ClassVar[Backend] = Backend.SANE

    # scanimage -L prints: device `epson2:libusb:001:004' is a Epson flatbed scanner
    _DEVICE_RE: ClassVar[re.Pattern[str]] = re.compile(r"device `([^`']+)[`'] is an? (.+)")
    _MISSING_DEVICE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"open of device .+ failed|no SANE devices found|Invalid argument",
        re.IGNORECASE,
    )
    _MODES: ClassVar[dict[ColorMode, str]] = {
        ColorMode.COLOR: "Color",
        ColorMode.GRAYSCALE: "Gray",
        ColorMode.MONOCHROME: "Lineart",
    }

    def __init__(self, command: str = "scanimage") -> None:
        super().__init__(command)

    def list_command(self) -> list[str]:
        return [self._command, "-L"]

    def parse_devices(self, output: str) -> list[DeviceDescriptor]:
        devices = []
        for line in output.splitlines():
            match = self._DEVICE_RE.search(line.strip())
            if match:
                devices.append(
                    DeviceDescriptor(
                        id=match.group(1),
                        display_name=match.group(2).strip(),
                        backend=self.backend,
                        available=True,
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
            "-d",
            device_id,
            "--resolution",
            str(options.resolution_dpi),
            f"--format={options.format.value}",
            "--mode",
            self._MODES[options.color_mode],
            f"--output-file={output_path}",
        ]

    def reports_missing_device(self, stderr: str) -> bool:
        return bool(self._MISSING_DEVICE_RE.search(stderr))
