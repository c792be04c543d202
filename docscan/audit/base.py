from abc import ABC, abstractmethod

from docscan.audit.models import AuditEvent


class BaseAuditSink(ABC):
    """Contract for audit trail destinations."""

    @abstractmethod
    def record(self, event: AuditEvent) -> None:
        """Append *event* to the audit trail."""
