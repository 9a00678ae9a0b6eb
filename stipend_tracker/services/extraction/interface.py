"""
Receipt Extraction Interface

Extraction is an injectable capability. The pipeline only knows this
interface, so a simulated backend and a real OCR backend are
interchangeable (and tests can plug in their own).
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from stipend_tracker.models.ledger import Category, ReceiptLineItem, ReceiptUpload


class ExtractionError(Exception):
    """Base exception for receipt extraction errors."""
    pass


class ExtractionFailedError(ExtractionError):
    """The extractor could not produce a usable receipt."""
    pass


class ExtractedReceipt(BaseModel):
    """
    What an extractor read from an uploaded image.

    Values are NOT validated against ledger rules here. The ledger store
    does that when the receipt is recorded.
    """
    model_config = ConfigDict(frozen=True)

    merchant: str
    amount: Decimal
    date: date
    category: Category = Category.OTHER
    line_items: tuple[ReceiptLineItem, ...] = ()
    source_reference: str = Field(
        ...,
        description="Where the image came from (filename or URL)"
    )


class ReceiptExtractor(ABC):
    """Turns an uploaded receipt image into structured receipt data."""

    @abstractmethod
    async def extract(self, upload: ReceiptUpload) -> ExtractedReceipt:
        """
        Extract receipt data from an upload.

        Raises:
            ExtractionFailedError: If nothing usable could be read
        """
        pass
