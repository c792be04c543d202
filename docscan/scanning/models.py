from dataclasses import dataclass
from enum import Enum


class Backend(str, Enum):
    """Scanner access protocol a device was discovered through."""

    SANE = "sane"
    WIA = "wia"


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    TIFF = "tiff"


class ColorMode(str, Enum):
    COLOR = "color"
    GRAYSCALE = "grayscale"
    MONOCHROME = "monochrome"


@dataclass(frozen=True)
class DeviceDescriptor:
    """A scanner reported by one backend. Rebuilt on every discovery."""

    id: str
    display_name: str
    backend: Backend
    available: bool = True


@dataclass(frozen=True)
class ScanOptions:
    """Capture parameters for one acquisition."""

    resolution_dpi: int = 300
    format: ImageFormat = ImageFormat.JPEG
    quality_percent: int = 90
    page_size: str = "A4"
    color_mode: ColorMode = ColorMode.COLOR

    def __post_init__(self) -> None:
        # Accept plain strings from CLI/JSON callers.
        object.__setattr__(self, "format", ImageFormat(self.format))
        object.__setattr__(self, "color_mode", ColorMode(self.color_mode))
        if self.resolution_dpi <= 0:
            raise ValueError(f"resolution_dpi must be positive, got {self.resolution_dpi}")
        if not 1 <= self.quality_percent <= 100:
            raise ValueError(
                f"quality_percent must be between 1 and 100, got {self.quality_percent}"
            )


@dataclass(frozen=True)
class ScanDetails:
    device_id: str
    resolution_dpi: int
    format: ImageFormat
    quality_percent: int
    page_size: str
    color_mode: ColorMode
    captured_at_epoch_ms: int


@dataclass(frozen=True)
class ScanResult:
    """A captured file on disk. Never mutated after creation."""

    file_path: str
    filename: str
    file_size_bytes: int
    mime_type: str
    scan_details: ScanDetails
