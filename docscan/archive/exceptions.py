class ArchiveError(Exception):
    """Base exception for archive sequencing and record persistence."""


class SequenceConflictError(ArchiveError):
    """Raised when the archive reference is already taken in the store."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Archive reference '{reference}' already exists")


class PersistenceFailedError(ArchiveError):
    """Raised when the document store rejects or fails a write."""


class ScanAlreadyProcessedError(ArchiveError):
    """Raised when a scan file is handed to the record builder a second time."""
