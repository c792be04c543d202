from collections.abc import Callable
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from docscan.archive.base import BaseDocumentStore
from docscan.archive.models import ArchiveReference, ArchiveStats, UserMetadata
from docscan.archive.record_builder import RecordBuilder
from docscan.archive.sequencer import ArchiveSequencer
from docscan.audit.base import BaseAuditSink
from docscan.audit.log_sink import LogAuditSink
from docscan.audit.models import AuditEvent
from docscan.auth.capabilities import DOCUMENT_SCAN, DOCUMENT_UPLOAD, DOCUMENT_VIEW
from docscan.auth.capability_authorizer import CapabilitySetAuthorizer
from docscan.auth.exceptions import UnauthorizedError
from docscan.auth.models import Actor
from docscan.batch.models import BatchItem, BatchResult
from docscan.database.repositories.audit_log_repository import AuditLogRepository
from docscan.processor.service import ScanningService, build_scanning_service
from docscan.scanning.exceptions import CaptureFailedError
from docscan.scanning.models import Backend, ScanResult
from docscan.scanning.orchestrator import ScanOrchestrator
from docscan.scanning.registry import DriverRegistry

SCANNER_ONLY = Actor(id="clerk-7", capabilities=frozenset({DOCUMENT_SCAN}))
NOBODY = Actor(id="guest")


def _service(
    fixed_now: datetime,
    store: BaseDocumentStore | None = None,
) -> tuple[ScanningService, dict[str, MagicMock]]:
    mocks = {
        "audit": MagicMock(spec=BaseAuditSink),
        "registry": MagicMock(spec=DriverRegistry),
        "orchestrator": MagicMock(spec=ScanOrchestrator),
        "builder": MagicMock(spec=RecordBuilder),
        "sequencer": MagicMock(spec=ArchiveSequencer),
        "store": store or MagicMock(spec=BaseDocumentStore),
    }
    service = ScanningService(
        authorizer=CapabilitySetAuthorizer(),
        audit_sink=mocks["audit"],
        registry=mocks["registry"],
        orchestrator=mocks["orchestrator"],
        record_builder=mocks["builder"],
        sequencer=mocks["sequencer"],
        store=mocks["store"],
        clock=lambda: fixed_now,
    )
    return service, mocks


def _recorded_event(audit: MagicMock) -> AuditEvent:
    audit.record.assert_called_once()
    return audit.record.call_args.args[0]


class TestAuthorization:
    def test_discover_requires_scan_capability(self, fixed_now: datetime) -> None:
        service, mocks = _service(fixed_now)

        with pytest.raises(UnauthorizedError) as exc_info:
            service.discover(NOBODY)

        assert exc_info.value.capability == DOCUMENT_SCAN
        assert exc_info.value.actor_id == "guest"
        mocks["registry"].discover.assert_not_called()

    def test_scan_denied_before_any_capture(self, fixed_now: datetime) -> None:
        service, mocks = _service(fixed_now)

        with pytest.raises(UnauthorizedError):
            service.scan_batch(NOBODY, "dev", 3)

        mocks["orchestrator"].scan_batch.assert_not_called()
        mocks["audit"].record.assert_not_called()

    def test_build_requires_upload_capability(
        self, fixed_now: datetime, scan_result_factory: Callable[..., ScanResult]
    ) -> None:
        service, mocks = _service(fixed_now)

        with pytest.raises(UnauthorizedError) as exc_info:
            service.build_record(SCANNER_ONLY, scan_result_factory())

        assert exc_info.value.capability == DOCUMENT_UPLOAD
        mocks["builder"].build_record.assert_not_called()

    def test_archive_batch_requires_archive_capability(self, fixed_now: datetime) -> None:
        service, mocks = _service(fixed_now)

        with pytest.raises(UnauthorizedError, match="document.archive"):
            service.create_archive_batch(SCANNER_ONLY, "Finance")
        mocks["sequencer"].allocate.assert_not_called()

    def test_stats_require_view_capability(self, fixed_now: datetime) -> None:
        service, _mocks = _service(fixed_now)

        with pytest.raises(UnauthorizedError, match=DOCUMENT_VIEW):
            service.archive_stats(SCANNER_ONLY)

    def test_wildcard_capability_grants_everything(self, fixed_now: datetime) -> None:
        service, mocks = _service(fixed_now)
        mocks["registry"].discover.return_value = []

        assert service.discover(Actor(id="admin", capabilities=frozenset({"*"}))) == []


class TestAudit:
    def test_successful_scan_is_audited(
        self,
        fixed_now: datetime,
        operator: Actor,
        scan_result_factory: Callable[..., ScanResult],
    ) -> None:
        service, mocks = _service(fixed_now)
        scan = scan_result_factory()
        mocks["orchestrator"].scan.return_value = scan

        assert service.scan(operator, "dev-1") is scan

        event = _recorded_event(mocks["audit"])
        assert event.operation == "DOCUMENT_SCANNED"
        assert event.actor_id == "operator-1"
        assert event.details["device_id"] == "dev-1"
        assert event.succeeded_count == 1
        assert event.occurred_at == fixed_now

    def test_failed_scan_is_audited_and_raised(self, fixed_now: datetime, operator: Actor) -> None:
        service, mocks = _service(fixed_now)
        mocks["orchestrator"].scan.side_effect = CaptureFailedError("dev-1", "lid open")

        with pytest.raises(CaptureFailedError):
            service.scan(operator, "dev-1")

        event = _recorded_event(mocks["audit"])
        assert event.operation == "DOCUMENT_SCAN_FAILED"
        assert event.failed_count == 1

    def test_bulk_scan_audits_counts(
        self,
        fixed_now: datetime,
        operator: Actor,
        scan_result_factory: Callable[..., ScanResult],
    ) -> None:
        service, mocks = _service(fixed_now)
        batch: BatchResult[ScanResult] = BatchResult(
            items=[
                BatchItem.success(1, scan_result_factory()),
                BatchItem.failure(2, CaptureFailedError("dev-1", "jam")),
            ]
        )
        mocks["orchestrator"].scan_batch.return_value = batch

        assert service.scan_batch(operator, "dev-1", 2) is batch

        event = _recorded_event(mocks["audit"])
        assert event.operation == "BULK_SCAN_COMPLETED"
        assert (event.succeeded_count, event.failed_count) == (1, 1)
        assert event.details["requested"] == 2

    def test_record_build_is_audited_with_reference(
        self,
        fixed_now: datetime,
        operator: Actor,
        scan_result_factory: Callable[..., ScanResult],
    ) -> None:
        service, mocks = _service(fixed_now)
        record = MagicMock(category="Finance", reference="ARCH-FIN-25-0001", id=12)
        mocks["builder"].build_record.return_value = record

        service.build_record(operator, scan_result_factory(), UserMetadata(category="Finance"))

        event = _recorded_event(mocks["audit"])
        assert event.operation == "SCANNED_DOCUMENT_PROCESSED"
        assert event.details["reference"] == "ARCH-FIN-25-0001"
        assert event.details["category"] == "Finance"

    def test_failed_record_build_is_audited(
        self,
        fixed_now: datetime,
        operator: Actor,
        scan_result_factory: Callable[..., ScanResult],
    ) -> None:
        service, mocks = _service(fixed_now)
        mocks["builder"].build_record.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            service.build_record(operator, scan_result_factory())

        event = _recorded_event(mocks["audit"])
        assert event.operation == "SCANNED_DOCUMENT_FAILED"
        assert event.details["category"] == "General"

    def test_bulk_build_is_audited(
        self,
        fixed_now: datetime,
        operator: Actor,
        scan_result_factory: Callable[..., ScanResult],
    ) -> None:
        service, mocks = _service(fixed_now)
        mocks["builder"].build_records.return_value = BatchResult(
            items=[BatchItem.failure(1, CaptureFailedError("dev", "jam"))]
        )

        service.build_records(operator, [scan_result_factory()])

        event = _recorded_event(mocks["audit"])
        assert event.operation == "BULK_ARCHIVE_PROCESSED"
        assert event.failed_count == 1
        assert event.details["references"] == []


class TestArchiveOperations:
    def test_create_archive_batch_returns_next_reference(
        self, fixed_now: datetime, operator: Actor
    ) -> None:
        service, mocks = _service(fixed_now)
        reference = ArchiveReference("Finance", 2025, 8, "ARCH-FIN-25-0008")
        mocks["sequencer"].allocate.return_value = reference

        assert service.create_archive_batch(operator, "Finance") is reference
        mocks["sequencer"].allocate.assert_called_once_with("Finance", None)

    def test_archive_stats_defaults_to_current_year(
        self, fixed_now: datetime, operator: Actor
    ) -> None:
        service, mocks = _service(fixed_now)
        mocks["store"].archive_stats.return_value = ArchiveStats(year=2025)

        stats = service.archive_stats(operator)

        assert stats.year == 2025
        mocks["store"].archive_stats.assert_called_once_with(2025)


def _settings(audit_sink: str = "log") -> MagicMock:
    settings = MagicMock()
    settings.scanner_backends = "sane,wia"
    settings.sane_command = "scanimage"
    settings.wia_command = "wia-cmd-scanner"
    settings.discovery_timeout_seconds = 15
    settings.capture_timeout_seconds = 180
    settings.scan_pacing_seconds = 2.0
    settings.scan_working_dir = "uploads/scans"
    settings.ocr_engine_path = "tesseract"
    settings.ocr_page_segmentation_mode = 6
    settings.ocr_timeout_seconds = 120
    settings.ocr_language = "eng"
    settings.ocr_max_workers = 1
    settings.pdf_engine = "pdfplumber"
    settings.audit_sink = audit_sink
    return settings


class TestBuildScanningService:
    def test_builds_service_with_log_audit(self) -> None:
        service = build_scanning_service(_settings())

        assert isinstance(service, ScanningService)
        assert isinstance(service._audit_sink, LogAuditSink)

    def test_database_audit_sink(self) -> None:
        service = build_scanning_service(_settings("database"))

        assert isinstance(service._audit_sink, AuditLogRepository)

    def test_unknown_audit_sink_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown audit sink"):
            build_scanning_service(_settings("kafka"))

    @patch("docscan.processor.service.ScannerBackendFactory.host_default")
    def test_falls_back_to_first_configured_backend(self, mock_default: MagicMock) -> None:
        mock_default.return_value = Backend.WIA
        settings = _settings()
        settings.scanner_backends = "sane"

        service = build_scanning_service(settings)

        assert service._orchestrator._default_backend is Backend.SANE
