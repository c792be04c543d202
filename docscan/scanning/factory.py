import sys

from docscan.config.settings import Settings
from docscan.scanning.base import BaseScannerBackend
from docscan.scanning.models import Backend
from docscan.scanning.sane_backend import SaneBackend
from docscan.scanning.wia_backend import WiaBackend


class ScannerBackendFactory:
    """Creates the scanner backends enabled in settings."""

    ADAPTERS: dict[Backend, type[BaseScannerBackend]] = {
        Backend.SANE: SaneBackend,
        Backend.WIA: WiaBackend,
    }

    @classmethod
    def create(cls, backend: Backend, settings: Settings) -> BaseScannerBackend:
        adapter_cls = cls.ADAPTERS.get(backend)
        if adapter_cls is None:
            raise ValueError(f"Unknown scanner backend '{backend}'")
        commands = {
            Backend.SANE: settings.sane_command,
            Backend.WIA: settings.wia_command,
        }
        return adapter_cls(command=commands[backend])

    @classmethod
    def create_all(cls, settings: Settings) -> dict[Backend, BaseScannerBackend]:
        """Create every backend listed in ``settings.scanner_backends`` (comma-separated)."""
        backends: dict[Backend, BaseScannerBackend] = {}
        for raw in settings.scanner_backends.split(","):
            name = raw.strip().lower()
            if not name:
                continue
            try:
                backend = Backend(name)
            except ValueError:
                raise ValueError(
                    f"Unknown scanner backend '{name}'. Choose from: "
                    f"{[b.value for b in cls.ADAPTERS]}"
                ) from None
            backends[backend] = cls.create(backend, settings)
        return backends

    @staticmethod
    def host_default(platform: str | None = None) -> Backend:
        """WIA on Windows hosts, SANE everywhere else."""
        platform = platform if platform is not None else sys.platform
        return Backend.WIA if platform.startswith("win") else Backend.SANE
