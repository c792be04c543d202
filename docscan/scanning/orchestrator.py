import time
from collections.abc import Callable, Mapping
from pathlib import Path

from docscan.batch.cancellation import CancellationToken
from docscan.batch.models import BatchItem, BatchResult
from docscan.commands.exceptions import CommandNotFoundError, CommandTimeoutError
from docscan.commands.runner import CommandResult, CommandRunner
from docscan.logging.logger import Log
from docscan.scanning.base import BaseScannerBackend
from docscan.scanning.exceptions import CaptureFailedError, DeviceNotFoundError
from docscan.scanning.models import Backend, ScanDetails, ScanOptions, ScanResult


def _epoch_ms() -> int:
    return time.time_ns() // 1_000_000


class ScanOrchestrator:
    """Drives acquisitions against one device and writes files to the working directory.

    Captures against a device are strictly sequential: ``scan_batch`` issues one
    request at a time and waits ``pacing_seconds`` between completions.
    """

    def __init__(
        self,
        backends: Mapping[Backend, BaseScannerBackend],
        runner: CommandRunner,
        working_dir: Path,
        default_backend: Backend,
        capture_timeout_seconds: float = 180,
        pacing_seconds: float = 2.0,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        self._backends = dict(backends)
        self._runner = runner
        self._working_dir = working_dir
        self._default_backend = default_backend
        self._capture_timeout_seconds = capture_timeout_seconds
        self._pacing_seconds = pacing_seconds
        self._clock = clock

    def scan(
        self,
        device_id: str,
        options: ScanOptions | None = None,
        backend: Backend | None = None,
    ) -> ScanResult:
        """Capture a single page.

        Raises:
            ValueError: if *device_id* is empty or the backend is not configured.
            DeviceNotFoundError: if the backend reports an unknown device.
            CaptureFailedError: for any other capture failure.
        """
        if not device_id:
            raise ValueError("device_id is required")
        options = options or ScanOptions()
        adapter = self._resolve(backend)

        self._working_dir.mkdir(parents=True, exist_ok=True)
        captured_at, output_path = self._next_output_path(options)
        command = adapter.capture_command(device_id, options, output_path)

        try:
            result = self._runner.run(command, self._capture_timeout_seconds)
        except CommandNotFoundError as exc:
            raise CaptureFailedError(device_id, f"{adapter.command} is not installed") from exc
        except CommandTimeoutError as exc:
            raise CaptureFailedError(device_id, str(exc)) from exc

        self._check_result(adapter, device_id, result)

        if not output_path.exists():
            raise CaptureFailedError(device_id, "scanner produced no output file")
        file_size = output_path.stat().st_size

        Log.info(
            f"Scanned {output_path.name} ({file_size} bytes)",
            device_id=device_id,
            backend=adapter.backend.value,
        )
        return ScanResult(
            file_path=str(output_path),
            filename=output_path.name,
            file_size_bytes=file_size,
            mime_type=f"image/{options.format.value}",
            scan_details=ScanDetails(
                device_id=device_id,
                resolution_dpi=options.resolution_dpi,
                format=options.format,
                quality_percent=options.quality_percent,
                page_size=options.page_size,
                color_mode=options.color_mode,
                captured_at_epoch_ms=captured_at,
            ),
        )

    def scan_batch(
        self,
        device_id: str,
        count: int,
        options: ScanOptions | None = None,
        backend: Backend | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BatchResult[ScanResult]:
        """Capture *count* pages one after another.

        A failed capture is recorded against its ordinal and the batch moves on;
        every ordinal is attempted unless *cancel_token* is set between items.
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        if not device_id:
            raise ValueError("device_id is required")
        self._resolve(backend)

        batch: BatchResult[ScanResult] = BatchResult()
        for ordinal in range(1, count + 1):
            if cancel_token is not None and cancel_token.cancelled:
                batch.cancelled = True
                Log.warning(
                    f"Bulk scan cancelled after {ordinal - 1}/{count} documents",
                    device_id=device_id,
                )
                break

            Log.info(f"Scanning document {ordinal}/{count}", device_id=device_id)
            try:
                scan_result = self.scan(device_id, options, backend)
            except Exception as exc:
                Log.warning(f"Document {ordinal}/{count} failed: {exc}", device_id=device_id)
                batch.items.append(BatchItem.failure(ordinal, exc))
            else:
                batch.items.append(BatchItem.success(ordinal, scan_result))

            if ordinal < count:
                self._pause(cancel_token)

        Log.info(
            f"Bulk scan finished: {batch.succeeded_count} scanned, {batch.failed_count} failed",
            device_id=device_id,
        )
        return batch

    def _resolve(self, backend: Backend | None) -> BaseScannerBackend:
        chosen = backend or self._default_backend
        adapter = self._backends.get(chosen)
        if adapter is None:
            raise ValueError(f"Scanner backend '{chosen.value}' is not configured")
        return adapter

    def _next_output_path(self, options: ScanOptions) -> tuple[int, Path]:
        captured_at = self._clock()
        path = self._working_dir / f"scan-{captured_at}.{options.format.value}"
        while path.exists():
            captured_at += 1
            path = self._working_dir / f"scan-{captured_at}.{options.format.value}"
        return captured_at, path

    @staticmethod
    def _check_result(
        adapter: BaseScannerBackend,
        device_id: str,
        result: CommandResult,
    ) -> None:
        stderr = result.stderr.strip()
        if not result.ok:
            if adapter.reports_missing_device(stderr):
                raise DeviceNotFoundError(device_id, stderr)
            raise CaptureFailedError(device_id, stderr or f"exit status {result.exit_code}")
        # Warning-only diagnostics on a zero exit are not failures.
        blocking = [
            line for line in stderr.splitlines()
            if line.strip() and "warning" not in line.lower()
        ]
        if blocking:
            raise CaptureFailedError(device_id, f"Scanning error: {stderr}")

    def _pause(self, cancel_token: CancellationToken | None) -> None:
        if self._pacing_seconds <= 0:
            return
        if cancel_token is not None:
            cancel_token.wait(self._pacing_seconds)
        else:
            time.sleep(self._pacing_seconds)
