from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from docscan.archive.base import BaseDocumentStore
from docscan.archive.exceptions import SequenceConflictError
from docscan.archive.models import (
    ArchiveStats,
    CategoryArchiveStats,
    DocumentRecord,
    MonthlyArchiveStats,
)
from docscan.auth.capabilities import ALL_CAPABILITIES
from docscan.auth.models import Actor
from docscan.scanning.models import ColorMode, ImageFormat, ScanDetails, ScanResult


class InMemoryDocumentStore(BaseDocumentStore):
    """Document store keeping records in a list, with the unique-reference rule."""

    def __init__(self) -> None:
        self.records: list[DocumentRecord] = []

    def save(self, record: DocumentRecord) -> int:
        if any(r.reference == record.reference for r in self.records):
            raise SequenceConflictError(record.reference)
        self.records.append(record)
        return len(self.records)

    def find_max_sequence(self, reference_prefix: str) -> int | None:
        sequences = [
            r.scan_metadata.archive_sequence
            for r in self.records
            if r.reference.startswith(reference_prefix)
        ]
        return max(sequences) if sequences else None

    def archive_stats(self, year: int) -> ArchiveStats:
        grouped: dict[str, dict[int, list[DocumentRecord]]] = {}
        for r in self.records:
            if r.created_at.year == year:
                grouped.setdefault(r.category, {}).setdefault(r.created_at.month, []).append(r)
        return ArchiveStats(
            year=year,
            categories=[
                CategoryArchiveStats(
                    category=category,
                    monthly=[
                        MonthlyArchiveStats(
                            month=month,
                            count=len(rows),
                            total_size=sum(r.file_size_bytes for r in rows),
                            avg_confidence=sum(r.ocr_data.confidence for r in rows) / len(rows),
                        )
                        for month, rows in sorted(months.items())
                    ],
                )
                for category, months in grouped.items()
            ],
        )


def _write_pdf(path: Path, pages: list[str]) -> Path:
    c = canvas.Canvas(str(path), pagesize=letter)
    for text in pages:
        if text:
            c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return path


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    """A single-page PDF with known text content."""
    return _write_pdf(tmp_path / "sample.pdf", ["Hello PDF World"])


@pytest.fixture()
def multi_page_pdf(tmp_path: Path) -> Path:
    """A two-page PDF with known text on each page."""
    return _write_pdf(tmp_path / "multi.pdf", ["Page one content", "Page two content"])


@pytest.fixture()
def empty_pdf(tmp_path: Path) -> Path:
    """A valid PDF with a blank page and no text layer."""
    return _write_pdf(tmp_path / "empty.pdf", [""])


@pytest.fixture()
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def operator() -> Actor:
    return Actor(id="operator-1", department="Records", capabilities=ALL_CAPABILITIES)


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def scan_result_factory(tmp_path: Path) -> Callable[..., ScanResult]:
    """Creates a scan file on disk and the ScanResult describing it."""
    counter = iter(range(1, 10_000))

    def _make(
        content: bytes = b"\xff\xd8fake-jpeg",
        image_format: ImageFormat = ImageFormat.JPEG,
        device_id: str = "epson2:libusb:001:004",
    ) -> ScanResult:
        captured_at = 1_741_944_600_000 + next(counter)
        path = tmp_path / f"scan-{captured_at}.{image_format.value}"
        path.write_bytes(content)
        return ScanResult(
            file_path=str(path),
            filename=path.name,
            file_size_bytes=len(content),
            mime_type=f"image/{image_format.value}",
            scan_details=ScanDetails(
                device_id=device_id,
                resolution_dpi=300,
                format=image_format,
                quality_percent=90,
                page_size="A4",
                color_mode=ColorMode.COLOR,
                captured_at_epoch_ms=captured_at,
            ),
        )

    return _make
