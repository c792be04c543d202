from dataclasses import dataclass, field, replace
from datetime import datetime

from docscan.scanning.models import ImageFormat

DEFAULT_CATEGORY = "General"
DEFAULT_PRIORITY = "Medium"
DEFAULT_DESCRIPTION = "Document scanned from physical copy"
DEFAULT_TAGS = ("scanned", "archived")
DEGRADED_DOCUMENT_TYPE = "Scanned Document"


@dataclass(frozen=True)
class ArchiveReference:
    category: str
    year: int
    sequence: int
    formatted: str


@dataclass(frozen=True)
class UserMetadata:
    """Fields supplied by the operator when archiving a scan."""

    title: str | None = None
    description: str | None = None
    category: str = DEFAULT_CATEGORY
    priority: str = DEFAULT_PRIORITY
    department: str | None = None
    tags: tuple[str, ...] = DEFAULT_TAGS
    is_confidential: bool = False
    original_name: str | None = None
    original_date: str | None = None
    archive_location: str | None = None
    box_number: int | None = None
    folder_number: int | None = None

    def for_batch_item(self, ordinal: int, image_format: ImageFormat) -> "UserMetadata":
        """Per-item copy of a batch template, suffixed with the 1-based *ordinal*."""
        base_title = self.title or DEGRADED_DOCUMENT_TYPE
        return replace(
            self,
            title=f"{base_title} - Document {ordinal}",
            original_name=f"Archive_Doc_{ordinal}.{ImageFormat(image_format).value}",
        )


@dataclass(frozen=True)
class OcrData:
    extracted_text: str = ""
    confidence: int = 0
    document_type: str = DEGRADED_DOCUMENT_TYPE
    keywords: list[str] = field(default_factory=list)
    date_references: list[str] = field(default_factory=list)
    organization_references: list[str] = field(default_factory=list)
    monetary_values: list[str] = field(default_factory=list)
    confidentiality_level: str = "internal"
    suggested_category: str = "other"
    suggested_tags: list[str] = field(default_factory=list)
    ocr_language: str = "eng"
    error_reason: str | None = None


@dataclass(frozen=True)
class ScanMetadata:
    device_id: str
    resolution_dpi: int
    format: str
    scan_date: datetime
    archive_sequence: int
    original_document_date: str | None = None
    archive_location: str | None = None
    box_number: int | None = None
    folder_number: int | None = None


@dataclass
class DocumentRecord:
    """A scanned document ready to persist. ``reference`` never changes once set."""

    reference: str
    title: str
    description: str
    filename: str
    original_name: str
    file_path: str
    file_size_bytes: int
    mime_type: str
    document_type: str
    category: str
    priority: str
    uploaded_by: str
    department: str | None
    tags: list[str]
    is_confidential: bool
    ocr_data: OcrData
    scan_metadata: ScanMetadata
    created_at: datetime
    status: str = "draft"
    id: int | None = None


@dataclass(frozen=True)
class MonthlyArchiveStats:
    month: int
    count: int
    total_size: int
    avg_confidence: float


@dataclass(frozen=True)
class CategoryArchiveStats:
    category: str
    monthly: list[MonthlyArchiveStats] = field(default_factory=list)

    @property
    def total_documents(self) -> int:
        return sum(m.count for m in self.monthly)

    @property
    def total_size(self) -> int:
        return sum(m.total_size for m in self.monthly)

    @property
    def avg_confidence(self) -> float:
        if not self.monthly:
            return 0.0
        return sum(m.avg_confidence for m in self.monthly) / len(self.monthly)


@dataclass(frozen=True)
class ArchiveStats:
    year: int
    categories: list[CategoryArchiveStats] = field(default_factory=list)

    @property
    def total_documents(self) -> int:
        return sum(c.total_documents for c in self.categories)

    @property
    def total_size(self) -> int:
        return sum(c.total_size for c in self.categories)

    @property
    def avg_confidence(self) -> float:
        if not self.categories:
            return 0.0
        return sum(c.avg_confidence for c in self.categories) / len(self.categories)
