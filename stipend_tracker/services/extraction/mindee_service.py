"""
Receipt Extraction using Mindee

DESIGN DECISION: We use Mindee because:
1. It has a dedicated receipt model (merchant, total, date, line items)
2. Returns STRUCTURED data, not just raw text
3. Provides confidence scores

This service handles:
1. Sending the uploaded image bytes to Mindee
2. Parsing the structured response
3. Rejecting results without a usable total or merchant
4. Converting the Mindee response to our ExtractedReceipt model
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

import structlog
from mindee import Client
from mindee.product import ReceiptV5
from tenacity import retry, stop_after_attempt, wait_exponential

from stipend_tracker.config import get_settings
from stipend_tracker.models.ledger import ReceiptLineItem, ReceiptUpload
from stipend_tracker.services.extraction.categorize import guess_category
from stipend_tracker.services.extraction.interface import (
    ExtractedReceipt,
    ExtractionFailedError,
    ReceiptExtractor,
)


logger = structlog.get_logger(__name__)

MIN_CONFIDENCE = 0.2


class MindeeReceiptExtractor(ReceiptExtractor):
    """
    Receipt extractor backed by the Mindee receipt API.

    IMPORTANT BOUNDARIES:
    1. This service ONLY extracts data - the ledger validates it
    2. Anything that does not look like a receipt fails loudly
    """

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key or get_settings().mindee.api_key
        self._client: Optional[Client] = None

    def _get_client(self) -> Client:
        """Get or create Mindee client."""
        if self._client is None:
            self._client = Client(api_key=self._api_key)
        return self._client

    def _safe_decimal(self, value) -> Optional[Decimal]:
        """Safely convert a value to Decimal."""
        if value is None:
            return None
        try:
            # Mindee returns float/None
            return Decimal(str(value)).quantize(Decimal("0.01"))
        except (InvalidOperation, TypeError, ValueError):
            return None

    def _safe_date(self, value) -> Optional[date]:
        """Safely convert a value to date."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d"):
                try:
                    return datetime.strptime(value, fmt).date()
                except ValueError:
                    continue
        return None

    def _extract_line_items(self, mindee_items) -> tuple[ReceiptLineItem, ...]:
        items = []
        for item in mindee_items or []:
            price = self._safe_decimal(getattr(item, "total_amount", None))
            if price is None or price < 0:
                continue
            name = str(getattr(item, "description", None) or "Item")[:200]
            items.append(ReceiptLineItem(name=name, price=price))
        return tuple(items)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _parse(self, upload: ReceiptUpload):
        client = self._get_client()
        input_source = client.source_from_bytes(upload.content, upload.filename)
        return client.parse(ReceiptV5, input_source)

    async def extract(self, upload: ReceiptUpload) -> ExtractedReceipt:
        """
        Extract receipt data from an uploaded image.

        Raises:
            ExtractionFailedError: If Mindee fails or the image has no
                readable merchant and total
        """
        try:
            # The Mindee client is blocking
            result = await asyncio.to_thread(self._parse, upload)
        except Exception as e:
            raise ExtractionFailedError(f"Receipt service error: {e}") from e

        try:
            extracted, confidence = self._to_extracted(result, upload)
        except (AttributeError, TypeError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            raise ExtractionFailedError(f"Unexpected receipt service response: {e}") from e

        logger.info(
            "mindee_extraction_completed",
            filename=upload.filename,
            merchant=extracted.merchant,
            confidence=round(confidence, 2),
        )
        return extracted

    def _to_extracted(self, result, upload: ReceiptUpload) -> tuple[ExtractedReceipt, float]:
        """Map a Mindee receipt prediction onto ExtractedReceipt."""
        prediction = result.document.inference.prediction

        confidences = [
            field.confidence
            for field in (prediction.total_amount, prediction.supplier_name)
            if field.value is not None
        ]
        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        if confidence < MIN_CONFIDENCE:
            raise ExtractionFailedError(
                "This doesn't appear to be a receipt. "
                "Please upload a clear photo of the whole receipt."
            )

        amount = self._safe_decimal(prediction.total_amount.value)
        merchant = prediction.supplier_name.value
        if amount is None or not merchant:
            raise ExtractionFailedError(
                "Could not read the merchant and total from this receipt."
            )

        ocr_category = getattr(prediction.category, "value", None)
        extracted = ExtractedReceipt(
            merchant=str(merchant)[:200],
            amount=amount,
            date=self._safe_date(prediction.date.value) or date.today(),
            category=guess_category(merchant, ocr_category),
            line_items=self._extract_line_items(prediction.line_items),
            source_reference=upload.filename,
        )
        return extracted, confidence
