from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

DOCUMENT_SCANNED = "DOCUMENT_SCANNED"
DOCUMENT_SCAN_FAILED = "DOCUMENT_SCAN_FAILED"
BULK_SCAN_COMPLETED = "BULK_SCAN_COMPLETED"
SCANNED_DOCUMENT_PROCESSED = "SCANNED_DOCUMENT_PROCESSED"
SCANNED_DOCUMENT_FAILED = "SCANNED_DOCUMENT_FAILED"
BULK_ARCHIVE_PROCESSED = "BULK_ARCHIVE_PROCESSED"


@dataclass(frozen=True)
class AuditEvent:
    """One audit trail entry for a pipeline operation."""

    actor_id: str
    operation: str
    occurred_at: datetime
    details: dict[str, Any] = field(default_factory=dict)
    succeeded_count: int = 0
    failed_count: int = 0
