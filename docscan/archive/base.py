from abc import ABC, abstractmethod

from docscan.archive.models import ArchiveStats, DocumentRecord


class BaseDocumentStore(ABC):
    """Contract for the document store the archive pipeline persists into."""

    @abstractmethod
    def save(self, record: DocumentRecord) -> int:
        """Persist *record* and return its id.

        Raises:
            SequenceConflictError: if ``record.reference`` already exists.
            PersistenceFailedError: on any other storage failure.
        """

    @abstractmethod
    def find_max_sequence(self, reference_prefix: str) -> int | None:
        """Highest archive sequence among references starting with *reference_prefix*.

        Categories with the same three-letter code share one sequence.
        """

    @abstractmethod
    def archive_stats(self, year: int) -> ArchiveStats:
        """Per-category monthly counts, sizes and OCR confidence for *year*."""
