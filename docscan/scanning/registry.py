from collections.abc import Iterable

from docscan.commands.exceptions import CommandError
from docscan.commands.runner import CommandRunner
from docscan.logging.logger import Log
from docscan.scanning.base import BaseScannerBackend
from docscan.scanning.exceptions import ScannerDiscoveryError
from docscan.scanning.models import Backend, DeviceDescriptor


class DriverRegistry:
    """Enumerates scanners across all configured backends."""

    def __init__(
        self,
        backends: Iterable[BaseScannerBackend],
        runner: CommandRunner,
        timeout_seconds: float,
    ) -> None:
        self._backends = list(backends)
        self._runner = runner
        self._timeout_seconds = timeout_seconds

    def discover(self) -> list[DeviceDescriptor]:
        """Probe every backend and return the available devices.

        A backend whose tool is missing, times out, or exits non-zero without
        any recognizable device line contributes nothing.

        Raises:
            ScannerDiscoveryError: if every backend probe failed.
        """
        if not self._backends:
            raise ScannerDiscoveryError("No scanner backends configured")

        devices: list[DeviceDescriptor] = []
        seen: set[tuple[Backend, str]] = set()
        failures: list[str] = []

        for adapter in self._backends:
            try:
                found = self._probe(adapter)
            except ScannerDiscoveryError as exc:
                Log.debug(f"No {adapter.backend.value} scanners detected: {exc}")
                failures.append(str(exc))
                continue
            for device in found:
                key = (device.backend, device.id)
                if not device.available or key in seen:
                    continue
                seen.add(key)
                devices.append(device)

        if len(failures) == len(self._backends):
            raise ScannerDiscoveryError(
                "All scanner backend probes failed: " + "; ".join(failures)
            )

        Log.info(f"Discovered {len(devices)} scanner(s)")
        return devices

    def _probe(self, adapter: BaseScannerBackend) -> list[DeviceDescriptor]:
        try:
            result = self._runner.run(adapter.list_command(), self._timeout_seconds)
        except CommandError as exc:
            raise ScannerDiscoveryError(f"{adapter.backend.value}: {exc}") from exc

        found = adapter.parse_devices(result.stdout)
        if not result.ok and not found:
            reason = result.stderr.strip() or f"exit status {result.exit_code}"
            raise ScannerDiscoveryError(f"{adapter.backend.value}: {reason}")
        return found
