from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from docscan.archive.base import BaseDocumentStore
from docscan.archive.models import ArchiveReference, ArchiveStats, DocumentRecord, UserMetadata
from docscan.archive.record_builder import RecordBuilder
from docscan.archive.sequencer import ArchiveSequencer, utc_now
from docscan.audit.base import BaseAuditSink
from docscan.audit.log_sink import LogAuditSink
from docscan.audit.models import (
    BULK_ARCHIVE_PROCESSED,
    BULK_SCAN_COMPLETED,
    DOCUMENT_SCAN_FAILED,
    DOCUMENT_SCANNED,
    SCANNED_DOCUMENT_FAILED,
    SCANNED_DOCUMENT_PROCESSED,
    AuditEvent,
)
from docscan.auth.base import BaseAuthorizationService
from docscan.auth.capabilities import (
    DOCUMENT_ARCHIVE,
    DOCUMENT_SCAN,
    DOCUMENT_UPLOAD,
    DOCUMENT_VIEW,
)
from docscan.auth.capability_authorizer import CapabilitySetAuthorizer
from docscan.auth.exceptions import UnauthorizedError
from docscan.auth.models import Actor
from docscan.batch.cancellation import CancellationToken
from docscan.batch.models import BatchItem, BatchResult
from docscan.classification.classifier import MetadataClassifier
from docscan.commands.runner import CommandRunner, SubprocessCommandRunner
from docscan.config.settings import Settings
from docscan.database.repositories.audit_log_repository import AuditLogRepository
from docscan.database.repositories.scanned_documents_repository import (
    ScannedDocumentsRepository,
)
from docscan.logging.logger import Log
from docscan.ocr.factory import OcrExtractorFactory
from docscan.scanning.factory import ScannerBackendFactory
from docscan.scanning.models import Backend, DeviceDescriptor, ScanOptions, ScanResult
from docscan.scanning.orchestrator import ScanOrchestrator
from docscan.scanning.registry import DriverRegistry


class ScanningService:
    """Entry points of the digitization pipeline.

    Every call checks the actor's capability before any external process runs
    and emits one audit event per completed scan, bulk scan or record build.
    """

    def __init__(
        self,
        authorizer: BaseAuthorizationService,
        audit_sink: BaseAuditSink,
        registry: DriverRegistry,
        orchestrator: ScanOrchestrator,
        record_builder: RecordBuilder,
        sequencer: ArchiveSequencer,
        store: BaseDocumentStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._authorizer = authorizer
        self._audit_sink = audit_sink
        self._registry = registry
        self._orchestrator = orchestrator
        self._record_builder = record_builder
        self._sequencer = sequencer
        self._store = store
        self._clock = clock

    def discover(self, actor: Actor) -> list[DeviceDescriptor]:
        self._authorize(actor, DOCUMENT_SCAN)
        return self._registry.discover()

    def scan(
        self,
        actor: Actor,
        device_id: str,
        options: ScanOptions | None = None,
        backend: Backend | None = None,
    ) -> ScanResult:
        self._authorize(actor, DOCUMENT_SCAN)
        try:
            result = self._orchestrator.scan(device_id, options, backend)
        except Exception as exc:
            self._audit(actor, DOCUMENT_SCAN_FAILED, failed=1, device_id=device_id, error=str(exc))
            raise
        self._audit(
            actor,
            DOCUMENT_SCANNED,
            succeeded=1,
            device_id=device_id,
            filename=result.filename,
        )
        return result

    def scan_batch(
        self,
        actor: Actor,
        device_id: str,
        count: int,
        options: ScanOptions | None = None,
        backend: Backend | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BatchResult[ScanResult]:
        self._authorize(actor, DOCUMENT_SCAN)
        batch = self._orchestrator.scan_batch(device_id, count, options, backend, cancel_token)
        self._audit(
            actor,
            BULK_SCAN_COMPLETED,
            succeeded=batch.succeeded_count,
            failed=batch.failed_count,
            device_id=device_id,
            requested=count,
            cancelled=batch.cancelled,
        )
        return batch

    def build_record(
        self,
        actor: Actor,
        scan_result: ScanResult,
        metadata: UserMetadata | None = None,
    ) -> DocumentRecord:
        self._authorize(actor, DOCUMENT_UPLOAD)
        metadata = metadata or UserMetadata()
        try:
            record = self._record_builder.build_record(scan_result, metadata, actor)
        except Exception as exc:
            self._audit(
                actor,
                SCANNED_DOCUMENT_FAILED,
                failed=1,
                category=metadata.category,
                filename=scan_result.filename,
                error=str(exc),
            )
            raise
        self._audit(
            actor,
            SCANNED_DOCUMENT_PROCESSED,
            succeeded=1,
            category=record.category,
            reference=record.reference,
            document_id=record.id,
        )
        return record

    def build_records(
        self,
        actor: Actor,
        scan_items: Sequence[BatchItem[ScanResult] | ScanResult],
        template: UserMetadata | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BatchResult[DocumentRecord]:
        self._authorize(actor, DOCUMENT_UPLOAD)
        template = template or UserMetadata()
        batch = self._record_builder.build_records(scan_items, template, actor, cancel_token)
        self._audit(
            actor,
            BULK_ARCHIVE_PROCESSED,
            succeeded=batch.succeeded_count,
            failed=batch.failed_count,
            category=template.category,
            references=[record.reference for record in batch.values()],
            cancelled=batch.cancelled,
        )
        return batch

    def create_archive_batch(
        self,
        actor: Actor,
        category: str,
        year: int | None = None,
    ) -> ArchiveReference:
        """Preview the next archive reference for *category* without persisting anything."""
        self._authorize(actor, DOCUMENT_ARCHIVE)
        reference = self._sequencer.allocate(category, year)
        Log.info(f"Next archive reference for {category}: {reference.formatted}")
        return reference

    def archive_stats(self, actor: Actor, year: int | None = None) -> ArchiveStats:
        self._authorize(actor, DOCUMENT_VIEW)
        return self._store.archive_stats(year if year is not None else self._clock().year)

    def _authorize(self, actor: Actor, capability: str) -> None:
        if not self._authorizer.is_authorized(actor, capability):
            Log.warning(f"Denied {capability}", actor=actor.id)
            raise UnauthorizedError(actor.id, capability)

    def _audit(
        self,
        actor: Actor,
        operation: str,
        succeeded: int = 0,
        failed: int = 0,
        **details: object,
    ) -> None:
        self._audit_sink.record(
            AuditEvent(
                actor_id=actor.id,
                operation=operation,
                occurred_at=self._clock(),
                details=dict(details),
                succeeded_count=succeeded,
                failed_count=failed,
            )
        )


def build_scanning_service(
    settings: Settings,
    authorizer: BaseAuthorizationService | None = None,
    runner: CommandRunner | None = None,
) -> ScanningService:
    """Build a ScanningService with all adapters wired from settings.

    The database-backed store and audit repository need ``init_pool`` first.
    """
    runner = runner or SubprocessCommandRunner()
    backends = ScannerBackendFactory.create_all(settings)
    default_backend = ScannerBackendFactory.host_default()
    if default_backend not in backends and backends:
        default_backend = next(iter(backends))

    store = ScannedDocumentsRepository()
    sequencer = ArchiveSequencer(store)
    audit_sink: BaseAuditSink
    if settings.audit_sink.lower() == "database":
        audit_sink = AuditLogRepository()
    elif settings.audit_sink.lower() == "log":
        audit_sink = LogAuditSink()
    else:
        raise ValueError(
            f"Unknown audit sink '{settings.audit_sink}'. Choose from: ['log', 'database']"
        )

    return ScanningService(
        authorizer=authorizer or CapabilitySetAuthorizer(),
        audit_sink=audit_sink,
        registry=DriverRegistry(
            backends.values(),
            runner,
            timeout_seconds=settings.discovery_timeout_seconds,
        ),
        orchestrator=ScanOrchestrator(
            backends,
            runner,
            working_dir=Path(settings.scan_working_dir),
            default_backend=default_backend,
            capture_timeout_seconds=settings.capture_timeout_seconds,
            pacing_seconds=settings.scan_pacing_seconds,
        ),
        record_builder=RecordBuilder(
            ocr_extractor=OcrExtractorFactory.create(settings, runner),
            classifier=MetadataClassifier(),
            sequencer=sequencer,
            store=store,
            ocr_language=settings.ocr_language,
            max_workers=settings.ocr_max_workers,
        ),
        sequencer=sequencer,
        store=store,
    )
