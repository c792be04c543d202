from collections.abc import Callable
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from docscan.archive.base import BaseDocumentStore
from docscan.archive.models import DocumentRecord, OcrData, ScanMetadata
from docscan.archive.sequencer import ArchiveSequencer


def _record(reference: str, category: str, sequence: int, created_at: datetime) -> DocumentRecord:
    return DocumentRecord(
        reference=reference,
        title="t",
        description="d",
        filename="scan-1.jpeg",
        original_name="scan-1.jpeg",
        file_path="/scans/scan-1.jpeg",
        file_size_bytes=10,
        mime_type="image/jpeg",
        document_type="Invoice",
        category=category,
        priority="Medium",
        uploaded_by="operator-1",
        department=None,
        tags=["scanned"],
        is_confidential=False,
        ocr_data=OcrData(),
        scan_metadata=ScanMetadata(
            device_id="dev",
            resolution_dpi=300,
            format="jpeg",
            scan_date=created_at,
            archive_sequence=sequence,
        ),
        created_at=created_at,
    )


class TestFormatReference:
    def test_formats_finance_example(self) -> None:
        assert ArchiveSequencer.format_reference("Finance", 2025, 7) == "ARCH-FIN-25-0007"

    def test_short_category_and_large_sequence(self) -> None:
        assert ArchiveSequencer.format_reference("hr", 2031, 12345) == "ARCH-HR-31-12345"

    def test_reference_prefix(self) -> None:
        assert ArchiveSequencer.reference_prefix("Financial", 2025) == "ARCH-FIN-25-"


class TestYearRange:
    def test_covers_whole_year_in_utc(self) -> None:
        start, end = ArchiveSequencer.year_range(2025)
        assert start == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


class TestNextSequence:
    def test_starts_at_one_for_empty_store(self, memory_store: BaseDocumentStore) -> None:
        assert ArchiveSequencer(memory_store).next_sequence("Finance", 2025) == 1

    def test_is_idempotent_without_persisted_record(self, memory_store: BaseDocumentStore) -> None:
        sequencer = ArchiveSequencer(memory_store)
        assert sequencer.next_sequence("Finance", 2025) == sequencer.next_sequence("Finance", 2025)

    def test_persisted_record_advances_sequence(self, memory_store: BaseDocumentStore) -> None:
        sequencer = ArchiveSequencer(memory_store)
        first = sequencer.next_sequence("Finance", 2025)
        memory_store.save(
            _record("ARCH-FIN-25-0001", "Finance", first, datetime(2025, 6, 1, tzinfo=timezone.utc))
        )

        assert sequencer.next_sequence("Finance", 2025) == first + 1

    def test_other_categories_and_years_are_independent(
        self, memory_store: BaseDocumentStore
    ) -> None:
        memory_store.save(
            _record("ARCH-FIN-24-0009", "Finance", 9, datetime(2024, 12, 31, tzinfo=timezone.utc))
        )
        memory_store.save(
            _record("ARCH-LEG-25-0004", "Legal", 4, datetime(2025, 2, 1, tzinfo=timezone.utc))
        )

        assert ArchiveSequencer(memory_store).next_sequence("Finance", 2025) == 1

    def test_queries_store_with_reference_prefix(self) -> None:
        store = MagicMock(spec=BaseDocumentStore)
        store.find_max_sequence.return_value = 41

        result = ArchiveSequencer(store).next_sequence("Legal", 2025)

        assert result == 42
        store.find_max_sequence.assert_called_once_with("ARCH-LEG-25-")

    def test_categories_sharing_a_code_share_the_sequence(
        self, memory_store: BaseDocumentStore
    ) -> None:
        memory_store.save(
            _record("ARCH-FIN-25-0001", "Finance", 1, datetime(2025, 3, 1, tzinfo=timezone.utc))
        )
        sequencer = ArchiveSequencer(memory_store)

        assert sequencer.next_sequence("Financial", 2025) == 2
        assert sequencer.next_sequence("finance", 2025) == 2

    def test_empty_category_raises(self, memory_store: BaseDocumentStore) -> None:
        with pytest.raises(ValueError, match="category is required"):
            ArchiveSequencer(memory_store).next_sequence("", 2025)


class TestAllocate:
    def test_defaults_to_current_year(
        self, memory_store: BaseDocumentStore, fixed_now: datetime
    ) -> None:
        clock: Callable[[], datetime] = lambda: fixed_now  # noqa: E731
        reference = ArchiveSequencer(memory_store, clock=clock).allocate("Finance")

        assert reference.year == 2025
        assert reference.sequence == 1
        assert reference.formatted == "ARCH-FIN-25-0001"

    def test_explicit_year(self, memory_store: BaseDocumentStore) -> None:
        reference = ArchiveSequencer(memory_store).allocate("Legal", 2019)

        assert reference.formatted == "ARCH-LEG-19-0001"
        assert reference.category == "Legal"
