import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone

from docscan.archive.base import BaseDocumentStore
from docscan.archive.exceptions import ScanAlreadyProcessedError
from docscan.archive.models import (
    DEFAULT_DESCRIPTION,
    DEGRADED_DOCUMENT_TYPE,
    DocumentRecord,
    OcrData,
    ScanMetadata,
    UserMetadata,
)
from docscan.archive.sequencer import ArchiveSequencer, utc_now
from docscan.auth.models import Actor
from docscan.batch.cancellation import CancellationToken
from docscan.batch.models import BatchItem, BatchResult
from docscan.classification.classifier import MetadataClassifier
from docscan.classification.models import ExtractedMetadata
from docscan.logging.logger import Log
from docscan.ocr.extractor import OcrExtractor
from docscan.ocr.models import OcrResult
from docscan.scanning.models import ScanResult


@dataclass(frozen=True)
class _Analysis:
    ocr: OcrResult
    metadata: ExtractedMetadata | None


class RecordBuilder:
    """Assembles and persists archive records from scans.

    A scan is archived at most once per builder. A scan whose record was not
    persisted (conflict, storage failure, cancelled batch) may be handed in
    again. A failed OCR still yields a record with empty text and zero
    confidence.
    """

    def __init__(
        self,
        ocr_extractor: OcrExtractor,
        classifier: MetadataClassifier,
        sequencer: ArchiveSequencer,
        store: BaseDocumentStore,
        ocr_language: str = "eng",
        max_workers: int = 1,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._ocr_extractor = ocr_extractor
        self._classifier = classifier
        self._sequencer = sequencer
        self._store = store
        self._ocr_language = ocr_language
        self._max_workers = max(1, max_workers)
        self._clock = clock
        self._claimed: set[str] = set()
        self._claimed_lock = threading.Lock()

    def build_record(
        self,
        scan_result: ScanResult,
        metadata: UserMetadata,
        actor: Actor,
    ) -> DocumentRecord:
        """OCR, classify, allocate a reference and persist one scan.

        Raises:
            ScanAlreadyProcessedError: if this scan was already handed in.
            SequenceConflictError: if the allocated reference was taken meanwhile.
            PersistenceFailedError: if the store write fails.
        """
        analysis = self._analyze(scan_result)
        try:
            return self._persist(scan_result, metadata, actor, analysis)
        except Exception:
            self._release(scan_result)
            raise

    def build_records(
        self,
        scan_items: Sequence[BatchItem[ScanResult] | ScanResult],
        template: UserMetadata,
        actor: Actor,
        cancel_token: CancellationToken | None = None,
    ) -> BatchResult[DocumentRecord]:
        """Build one record per scan, isolating failures per ordinal.

        Failed scans are passed through without OCR. Titles are suffixed with
        `` - Document {n}`` where n is the 1-based position in *scan_items*.
        OCR may run on a thread pool; reference allocation and persistence run
        in ordinal order on the calling thread.
        """
        items = [self._as_item(ordinal, item) for ordinal, item in enumerate(scan_items, start=1)]
        if not items:
            raise ValueError("scan_items must not be empty")

        batch: BatchResult[DocumentRecord] = BatchResult()
        executor = ThreadPoolExecutor(self._max_workers) if self._max_workers > 1 else None
        try:
            pending: dict[int, Future[_Analysis]] = {}
            if executor is not None:
                for ordinal, item in enumerate(items, start=1):
                    if item.ok and item.value is not None:
                        pending[ordinal] = executor.submit(self._analyze, item.value)

            for ordinal, item in enumerate(items, start=1):
                if cancel_token is not None and cancel_token.cancelled:
                    batch.cancelled = True
                    Log.warning(
                        f"Bulk archive cancelled after {ordinal - 1}/{len(items)} documents"
                    )
                    break
                batch.items.append(self._build_item(ordinal, item, template, actor, pending))
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)
                self._release_unused(items, pending)

        Log.info(
            f"Bulk archive finished: {batch.succeeded_count} processed, "
            f"{batch.failed_count} failed",
            category=template.category,
        )
        return batch

    def _build_item(
        self,
        ordinal: int,
        item: BatchItem[ScanResult],
        template: UserMetadata,
        actor: Actor,
        pending: dict[int, Future[_Analysis]],
    ) -> BatchItem[DocumentRecord]:
        if not item.ok or item.value is None:
            return BatchItem(ordinal=ordinal, error=item.error, error_type=item.error_type)

        scan_result = item.value
        try:
            future = pending.pop(ordinal, None)
            analysis = future.result() if future is not None else self._analyze(scan_result)
        except Exception as exc:
            Log.warning(f"Document {ordinal} was not analyzed: {exc}", file=scan_result.filename)
            return BatchItem.failure(ordinal, exc)

        try:
            metadata = template.for_batch_item(ordinal, scan_result.scan_details.format)
            record = self._persist(scan_result, metadata, actor, analysis)
        except Exception as exc:
            self._release(scan_result)
            Log.warning(f"Document {ordinal} was not archived: {exc}", file=scan_result.filename)
            return BatchItem.failure(ordinal, exc)
        return BatchItem.success(ordinal, record)

    @staticmethod
    def _as_item(ordinal: int, item: BatchItem[ScanResult] | ScanResult) -> BatchItem[ScanResult]:
        if isinstance(item, BatchItem):
            return item
        return BatchItem.success(ordinal, item)

    def _claim(self, scan_result: ScanResult) -> None:
        with self._claimed_lock:
            if scan_result.file_path in self._claimed:
                raise ScanAlreadyProcessedError(
                    f"Scan '{scan_result.filename}' has already been processed"
                )
            self._claimed.add(scan_result.file_path)

    def _release(self, scan_result: ScanResult) -> None:
        with self._claimed_lock:
            self._claimed.discard(scan_result.file_path)

    def _release_unused(
        self,
        items: list[BatchItem[ScanResult]],
        pending: dict[int, Future[_Analysis]],
    ) -> None:
        """Free scans whose OCR finished but which were never persisted."""
        for ordinal, future in pending.items():
            scan_result = items[ordinal - 1].value
            if scan_result is None or future.cancelled():
                continue
            if future.exception() is None:
                self._release(scan_result)

    def _analyze(self, scan_result: ScanResult) -> _Analysis:
        self._claim(scan_result)
        try:
            ocr = self._ocr_extractor.extract(
                scan_result.file_path,
                scan_result.mime_type,
                self._ocr_language,
            )
            if not ocr.success:
                return _Analysis(ocr=ocr, metadata=None)
            metadata = self._classifier.classify(ocr.text, scan_result.filename)
        except Exception:
            self._release(scan_result)
            raise
        return _Analysis(ocr=ocr, metadata=metadata)

    def _ocr_data(self, analysis: _Analysis) -> OcrData:
        ocr, extracted = analysis.ocr, analysis.metadata
        if not ocr.success or extracted is None:
            return OcrData(ocr_language=ocr.language, error_reason=ocr.error_reason)
        return OcrData(
            extracted_text=ocr.text,
            confidence=extracted.confidence,
            document_type=extracted.document_type,
            keywords=list(extracted.keywords),
            date_references=list(extracted.date_references),
            organization_references=list(extracted.organization_references),
            monetary_values=list(extracted.monetary_values),
            confidentiality_level=extracted.confidentiality_level,
            suggested_category=extracted.suggested_category,
            suggested_tags=list(extracted.suggested_tags),
            ocr_language=ocr.language,
        )

    def _persist(
        self,
        scan_result: ScanResult,
        metadata: UserMetadata,
        actor: Actor,
        analysis: _Analysis,
    ) -> DocumentRecord:
        now = self._clock()
        ocr_data = self._ocr_data(analysis)
        archive = self._sequencer.allocate(metadata.category, now.year)
        details = scan_result.scan_details

        record = DocumentRecord(
            reference=archive.formatted,
            title=metadata.title or f"{DEGRADED_DOCUMENT_TYPE} - {now:%Y-%m-%d}",
            description=metadata.description or DEFAULT_DESCRIPTION,
            filename=scan_result.filename,
            original_name=metadata.original_name or scan_result.filename,
            file_path=scan_result.file_path,
            file_size_bytes=scan_result.file_size_bytes,
            mime_type=scan_result.mime_type,
            document_type=ocr_data.document_type,
            category=metadata.category,
            priority=metadata.priority,
            uploaded_by=actor.id,
            department=metadata.department or actor.department,
            tags=list(metadata.tags),
            is_confidential=metadata.is_confidential,
            ocr_data=ocr_data,
            scan_metadata=ScanMetadata(
                device_id=details.device_id,
                resolution_dpi=details.resolution_dpi,
                format=details.format.value,
                scan_date=datetime.fromtimestamp(
                    details.captured_at_epoch_ms / 1000, tz=timezone.utc
                ),
                archive_sequence=archive.sequence,
                original_document_date=metadata.original_date,
                archive_location=metadata.archive_location,
                box_number=metadata.box_number,
                folder_number=metadata.folder_number,
            ),
            created_at=now,
        )
        record.id = self._store.save(record)
        Log.info(
            f"Archived {record.filename} as {record.reference}",
            document_type=record.document_type,
            ocr_confidence=ocr_data.confidence,
        )
        return record
