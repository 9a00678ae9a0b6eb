"""Receipt extraction services package."""

from stipend_tracker.services.extraction.categorize import guess_category
from stipend_tracker.services.extraction.interface import (
    ExtractedReceipt,
    ExtractionError,
    ExtractionFailedError,
    ReceiptExtractor,
)
from stipend_tracker.services.extraction.simulated import (
    SIMULATED_MERCHANTS,
    SimulatedReceiptExtractor,
)

__all__ = [
    "ExtractedReceipt",
    "ExtractionError",
    "ExtractionFailedError",
    "ReceiptExtractor",
    "SIMULATED_MERCHANTS",
    "SimulatedReceiptExtractor",
    "guess_category",
]
