import psycopg
from psycopg.types.json import Jsonb

from docscan.audit.base import BaseAuditSink
from docscan.audit.models import AuditEvent
from docscan.database.connection import get_connection
from docscan.logging.logger import Log


class AuditLogRepository(BaseAuditSink):
    """Audit sink backed by the audit_logs table."""

    def record(self, event: AuditEvent) -> None:
        """Insert *event*. A failed write is logged, not raised."""
        try:
            with get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO audit_logs
                    (actor_id, operation, details, succeeded_count, failed_count, occurred_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (
                        event.actor_id,
                        event.operation,
                        Jsonb(event.details),
                        event.succeeded_count,
                        event.failed_count,
                        event.occurred_at,
                    ),
                )
                conn.commit()
        except psycopg.Error as exc:
            Log.error(f"Failed to write audit event {event.operation}: {exc}")
