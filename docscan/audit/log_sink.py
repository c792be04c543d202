from docscan.audit.base import BaseAuditSink
from docscan.audit.models import AuditEvent
from docscan.logging.logger import Log


class LogAuditSink(BaseAuditSink):
    """Writes audit events to the application log."""

    def record(self, event: AuditEvent) -> None:
        Log.info(
            f"AUDIT {event.operation}",
            actor=event.actor_id,
            succeeded=event.succeeded_count,
            failed=event.failed_count,
            at=event.occurred_at.isoformat(),
            **event.details,
        )
