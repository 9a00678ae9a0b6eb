"""
Receipt Ingestion Pipeline

Turns an uploaded receipt image into a Receipt plus one expense
Transaction in the ledger.

Flow:
1. Upload  → check file type and size (rejected uploads never start)
2. Extract → await the injected ReceiptExtractor
3. Record  → ledger.record_receipt_expense (receipt + transaction, atomically)

State machine:
    idle → processing → completed | failed → idle

DESIGN DECISION: Only one extraction can be in flight. A second submit
while processing is refused loudly with PipelineBusyError rather than
queued, so the user never wonders which upload produced which entry.

A failed extraction leaves the ledger untouched.
"""

from enum import Enum
from typing import Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaError

from stipend_tracker.audit import AuditLogger, create_correlation_id
from stipend_tracker.ledger.store import LedgerStore
from stipend_tracker.models.audit import AuditEventBuilder
from stipend_tracker.models.ledger import Receipt, ReceiptUpload, Transaction
from stipend_tracker.services.extraction import (
    ExtractedReceipt,
    ExtractionFailedError,
    ReceiptExtractor,
)
from stipend_tracker.validation import ValidationError


logger = structlog.get_logger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PipelineError(Exception):
    """Base exception for pipeline errors."""
    pass


class PipelineBusyError(PipelineError):
    """A receipt is already being processed."""
    pass


class UploadRejectedError(PipelineError):
    """The upload is not something the pipeline will process."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(reason)


class IngestionResult(BaseModel):
    """Outcome of one submit() call."""
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    receipt: Optional[Receipt] = None
    transaction: Optional[Transaction] = None
    correlation_id: Optional[UUID] = None


class ReceiptIngestionPipeline:
    """
    Drives one receipt at a time from upload to ledger.

    Usage:
        pipeline = ReceiptIngestionPipeline(ledger, SimulatedReceiptExtractor())
        result = await pipeline.submit(ReceiptUpload(filename="r.jpg", content=data))
        if result.success:
            print(result.transaction.amount)
    """

    def __init__(
        self,
        ledger: LedgerStore,
        extractor: ReceiptExtractor,
        audit_logger: Optional[AuditLogger] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self._ledger = ledger
        self._extractor = extractor
        self._audit = audit_logger or AuditLogger()
        self._max_upload_bytes = max_upload_bytes
        self._state = PipelineState.IDLE
        self._last_state: Optional[PipelineState] = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def last_state(self) -> Optional[PipelineState]:
        """Terminal state of the most recent submit, None before the first one."""
        return self._last_state

    @property
    def is_busy(self) -> bool:
        return self._state == PipelineState.PROCESSING

    def _check_upload(self, upload: ReceiptUpload) -> None:
        reason = None
        if upload.size_bytes == 0:
            reason = "The uploaded file is empty"
        elif self._max_upload_bytes is not None and upload.size_bytes > self._max_upload_bytes:
            limit_mb = self._max_upload_bytes / (1024 * 1024)
            reason = f"File is too large. Maximum size is {limit_mb:g} MB"

        if reason is not None:
            self._audit.log(AuditEventBuilder.upload_rejected(upload.filename, reason))
            raise UploadRejectedError(upload.filename, reason)

    async def submit(self, upload: ReceiptUpload) -> IngestionResult:
        """
        Process one uploaded receipt.

        Raises:
            PipelineBusyError: If another receipt is still processing
            UploadRejectedError: If the file is empty or too large
        """
        if self.is_busy:
            raise PipelineBusyError("A receipt is already being processed. Please wait.")
        self._check_upload(upload)

        self._state = PipelineState.PROCESSING
        terminal = PipelineState.FAILED
        try:
            result = await self._process(upload, create_correlation_id())
            if result.success:
                terminal = PipelineState.COMPLETED
            return result
        finally:
            self._last_state = terminal
            self._state = PipelineState.IDLE

    async def _process(self, upload: ReceiptUpload, correlation_id: UUID) -> IngestionResult:
        self._audit.log_receipt_uploaded(
            filename=upload.filename,
            file_size=upload.size_bytes,
            correlation_id=correlation_id,
        )

        try:
            extracted = await self._extractor.extract(upload)
        except ExtractionFailedError as e:
            return self._failed(upload, str(e), correlation_id)
        except Exception as e:
            reason = str(e) or type(e).__name__
            self._audit.log_external_service_error(
                service=type(self._extractor).__name__,
                error_message=reason,
                correlation_id=correlation_id,
            )
            return self._failed(upload, f"Receipt extraction failed: {reason}", correlation_id)

        try:
            receipt = self._to_receipt(extracted)
            transaction = self._ledger.record_receipt_expense(receipt)
        except SchemaError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            return self._failed(
                upload, f"Extracted receipt is invalid ({field}: {first['msg']})", correlation_id
            )
        except ValidationError as e:
            return self._failed(upload, f"Extracted receipt is invalid ({e})", correlation_id)

        self._audit.log_extraction_completed(
            receipt_id=receipt.id,
            transaction_id=transaction.id,
            merchant=receipt.merchant,
            amount=str(receipt.amount),
            correlation_id=correlation_id,
        )
        return IngestionResult(
            success=True,
            message=f"Receipt processed: {receipt.merchant} - {receipt.amount:.2f}",
            receipt=receipt,
            transaction=transaction,
            correlation_id=correlation_id,
        )

    def _to_receipt(self, extracted: ExtractedReceipt) -> Receipt:
        return Receipt(
            merchant=extracted.merchant,
            amount=extracted.amount,
            date=extracted.date,
            category=extracted.category,
            source_reference=extracted.source_reference,
            line_items=extracted.line_items,
        )

    def _failed(self, upload: ReceiptUpload, message: str, correlation_id: UUID) -> IngestionResult:
        logger.warning("receipt_ingestion_failed", filename=upload.filename, reason=message)
        self._audit.log_extraction_failed(
            filename=upload.filename,
            error_message=message,
            correlation_id=correlation_id,
        )
        return IngestionResult(success=False, message=message, correlation_id=correlation_id)
