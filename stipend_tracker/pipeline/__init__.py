"""Receipt ingestion pipeline package."""

from stipend_tracker.pipeline.receipts import (
    IngestionResult,
    PipelineBusyError,
    PipelineError,
    PipelineState,
    ReceiptIngestionPipeline,
    UploadRejectedError,
)

__all__ = [
    "IngestionResult",
    "PipelineBusyError",
    "PipelineError",
    "PipelineState",
    "ReceiptIngestionPipeline",
    "UploadRejectedError",
]
