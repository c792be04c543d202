from collections.abc import Callable
from datetime import datetime, timezone

from docscan.archive.base import BaseDocumentStore
from docscan.archive.models import ArchiveReference
from docscan.logging.logger import Log


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArchiveSequencer:
    """Computes archive sequence numbers from the document store.

    There is no in-process counter: every call reads the highest persisted
    sequence, so restarts and concurrent workers see the same state.
    """

    PREFIX = "ARCH"

    def __init__(
        self,
        store: BaseDocumentStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock

    @staticmethod
    def year_range(year: int) -> tuple[datetime, datetime]:
        return (
            datetime(year, 1, 1, tzinfo=timezone.utc),
            datetime(year, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        )

    def next_sequence(self, category: str, year: int) -> int:
        if not category:
            raise ValueError("category is required")
        current = self._store.find_max_sequence(self.reference_prefix(category, year))
        return (current or 0) + 1

    @classmethod
    def reference_prefix(cls, category: str, year: int) -> str:
        """``ARCH-{CAT}-{YY}-``, the part of a reference before the sequence."""
        category_code = category[:3].upper()
        year_code = str(year)[-2:]
        return f"{cls.PREFIX}-{category_code}-{year_code}-"

    @classmethod
    def format_reference(cls, category: str, year: int, sequence: int) -> str:
        """``ARCH-{CAT}-{YY}-{NNNN}``, e.g. ``ARCH-FIN-25-0007``."""
        return f"{cls.reference_prefix(category, year)}{sequence:04d}"

    def allocate(self, category: str, year: int | None = None) -> ArchiveReference:
        """Next free reference for *category* in *year* (default: current year)."""
        year = year if year is not None else self._clock().year
        sequence = self.next_sequence(category, year)
        formatted = self.format_reference(category, year, sequence)
        Log.debug(f"Allocated archive reference {formatted}", category=category)
        return ArchiveReference(
            category=category,
            year=year,
            sequence=sequence,
            formatted=formatted,
        )
