"""
Simulated Receipt Extractor

Stands in for a real OCR service during demos and tests. It waits a
little, then returns a plausible receipt drawn from a small set of
merchants students commonly shop at.

The random source and the delay are injectable so tests are
deterministic and fast.
"""

import asyncio
import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

import structlog

from stipend_tracker.models.ledger import Category, ReceiptLineItem, ReceiptUpload, to_cents
from stipend_tracker.services.extraction.interface import (
    ExtractedReceipt,
    ExtractionFailedError,
    ReceiptExtractor,
)


logger = structlog.get_logger(__name__)


SIMULATED_MERCHANTS: tuple[str, ...] = (
    "Target",
    "Walmart",
    "McDonalds",
    "Metro Transit",
    "CVS Pharmacy",
)

LOOKBACK_DAYS = 30


class SimulatedReceiptExtractor(ReceiptExtractor):
    """Returns randomized but plausible receipts."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        delay_seconds: float = 2.0,
        failure_rate: float = 0.0,
        today: Callable[[], date] = date.today,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")
        self._rng = rng or random.Random()
        self._delay = delay_seconds
        self._failure_rate = failure_rate
        self._today = today

    def _money(self, low: float, spread: float) -> Decimal:
        return to_cents(Decimal(str(low + self._rng.random() * spread)))

    def _category_for(self, merchant: str) -> Category:
        # General stores sell a bit of everything
        if merchant in ("Target", "Walmart"):
            return self._rng.choice((Category.FOOD, Category.PERSONAL_CARE))
        if "McDonald" in merchant:
            return Category.FOOD
        if "Metro" in merchant:
            return Category.TRANSPORTATION
        if "CVS" in merchant:
            return Category.PERSONAL_CARE
        return Category.OTHER

    async def extract(self, upload: ReceiptUpload) -> ExtractedReceipt:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

        if self._failure_rate and self._rng.random() < self._failure_rate:
            raise ExtractionFailedError(f"Could not read receipt {upload.filename}")

        merchant = self._rng.choice(SIMULATED_MERCHANTS)
        receipt = ExtractedReceipt(
            merchant=merchant,
            amount=self._money(5, 50),
            date=self._today() - timedelta(days=self._rng.randrange(LOOKBACK_DAYS)),
            category=self._category_for(merchant),
            line_items=(
                ReceiptLineItem(name="Item 1", price=self._money(0, 20)),
                ReceiptLineItem(name="Item 2", price=self._money(0, 15)),
            ),
            source_reference=upload.filename,
        )
        logger.debug(
            "simulated_extraction",
            filename=upload.filename,
            merchant=receipt.merchant,
            amount=str(receipt.amount),
        )
        return receipt
