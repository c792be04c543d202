from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar

from docscan.scanning.models import Backend, DeviceDescriptor, ScanOptions


class BaseScannerBackend(ABC):
    """Contract for a scanner access protocol driven through its command-line tool."""

    backend: ClassVar[Backend]

    def __init__(self, command: str) -> None:
        self._command = command

    @property
    def command(self) -> str:
        return self._command

    @abstractmethod
    def list_command(self) -> list[str]:
        """Argv that prints one device per line."""

    @abstractmethod
    def parse_devices(self, output: str) -> list[DeviceDescriptor]:
        """Parse the listing printed by :meth:`list_command`.

        Lines that are not recognizable device descriptors are ignored.
        """

    @abstractmethod
    def capture_command(
        self,
        device_id: str,
        options: ScanOptions,
        output_path: Path,
    ) -> list[str]:
        """Argv that captures one page from *device_id* into *output_path*."""

    def reports_missing_device(self, stderr: str) -> bool:
        """Whether *stderr* says the requested device does not exist."""
        return False
