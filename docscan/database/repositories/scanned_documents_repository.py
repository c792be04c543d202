from dataclasses import asdict
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docscan.archive.base import BaseDocumentStore
from docscan.archive.exceptions import PersistenceFailedError, SequenceConflictError
from docscan.archive.models import (
    ArchiveStats,
    CategoryArchiveStats,
    DocumentRecord,
    MonthlyArchiveStats,
)
from docscan.archive.sequencer import ArchiveSequencer
from docscan.database.connection import get_connection


def _like_prefix(prefix: str) -> str:
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"{escaped}%"


class ScannedDocumentsRepository(BaseDocumentStore):
    """Database operations for the scanned_documents table."""

    def save(self, record: DocumentRecord) -> int:
        """Insert *record* and return the new row id.

        Raises:
            SequenceConflictError: if ``record.reference`` is already stored.
            PersistenceFailedError: on any other database failure.
        """
        scan_metadata = asdict(record.scan_metadata)
        scan_metadata["scan_date"] = record.scan_metadata.scan_date.isoformat()
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO scanned_documents
                        (reference, title, description, filename, original_name,
                         file_path, file_size_bytes, mime_type, document_type,
                         category, priority, uploaded_by, department, tags,
                         is_confidential, status, ocr_data, scan_metadata,
                         archive_sequence, ocr_confidence, created_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                                %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        ON CONFLICT (reference) DO NOTHING
                        RETURNING id
                        """,
                        (
                            record.reference,
                            record.title,
                            record.description,
                            record.filename,
                            record.original_name,
                            record.file_path,
                            record.file_size_bytes,
                            record.mime_type,
                            record.document_type,
                            record.category,
                            record.priority,
                            record.uploaded_by,
                            record.department,
                            Jsonb(record.tags),
                            record.is_confidential,
                            record.status,
                            Jsonb(asdict(record.ocr_data)),
                            Jsonb(scan_metadata),
                            record.scan_metadata.archive_sequence,
                            record.ocr_data.confidence,
                            record.created_at,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceFailedError(
                f"Failed to store document {record.reference}: {exc}"
            ) from exc

        if row is None:
            raise SequenceConflictError(record.reference)
        return int(row[0])

    def find_max_sequence(self, reference_prefix: str) -> int | None:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT MAX(archive_sequence)
                        FROM scanned_documents
                        WHERE reference LIKE %s
                        """,
                        (_like_prefix(reference_prefix),),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceFailedError(
                f"Failed to read archive sequence for {reference_prefix}: {exc}"
            ) from exc

        if row is None or row[0] is None:
            return None
        return int(row[0])

    def find_by_reference(self, reference: str) -> dict[str, Any] | None:
        """Raw stored row for *reference*, or None."""
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT id, reference, title, category, document_type,
                               archive_sequence, ocr_confidence, status, created_at
                        FROM scanned_documents
                        WHERE reference = %s
                        """,
                        (reference,),
                    )
                    return cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceFailedError(f"Failed to read document {reference}: {exc}") from exc

    def archive_stats(self, year: int) -> ArchiveStats:
        created_from, created_to = ArchiveSequencer.year_range(year)
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT category,
                               EXTRACT(MONTH FROM created_at)::int AS month,
                               COUNT(*) AS count,
                               COALESCE(SUM(file_size_bytes), 0) AS total_size,
                               COALESCE(AVG(ocr_confidence), 0) AS avg_confidence
                        FROM scanned_documents
                        WHERE created_at BETWEEN %s AND %s
                        GROUP BY category, month
                        ORDER BY category, month
                        """,
                        (created_from, created_to),
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise PersistenceFailedError(f"Failed to read archive stats for {year}: {exc}") from exc

        monthly: dict[str, list[MonthlyArchiveStats]] = {}
        for row in rows:
            monthly.setdefault(row["category"], []).append(
                MonthlyArchiveStats(
                    month=int(row["month"]),
                    count=int(row["count"]),
                    total_size=int(row["total_size"]),
                    avg_confidence=float(row["avg_confidence"]),
                )
            )
        return ArchiveStats(
            year=year,
            categories=[
                CategoryArchiveStats(category=category, monthly=months)
                for category, months in monthly.items()
            ],
        )
