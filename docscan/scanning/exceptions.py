class ScanningError(Exception):
    """Base exception for scanner discovery and capture."""


class ScannerDiscoveryError(ScanningError):
    """Raised when every configured backend probe failed."""


class CaptureFailedError(ScanningError):
    """Raised when a single acquisition does not produce a usable file."""

    def __init__(self, device_id: str, reason: str) -> None:
        self.device_id = device_id
        self.reason = reason
        super().__init__(f"Capture failed on device '{device_id}': {reason}")


class DeviceNotFoundError(CaptureFailedError):
    """Raised when the backend reports that the device does not exist."""

    def __init__(self, device_id: str, reason: str = "device not found") -> None:
        super().__init__(device_id, reason)
