"""Tests for receipt categorization and the Mindee extractor's parsing."""

import asyncio
from types import SimpleNamespace

import pytest
from datetime import date
from decimal import Decimal

from stipend_tracker.models import Category, ReceiptUpload
from stipend_tracker.services.extraction import ExtractionFailedError, guess_category
from stipend_tracker.services.extraction.mindee_service import MindeeReceiptExtractor


def field(value, confidence=0.9):
    return SimpleNamespace(value=value, confidence=confidence)


def mindee_result(total=12.3, supplier="Starbucks", receipt_date="2026-10-12",
                  category="food", line_items=(), confidence=0.9):
    prediction = SimpleNamespace(
        total_amount=field(total, confidence),
        supplier_name=field(supplier, confidence),
        date=field(receipt_date),
        category=field(category),
        line_items=list(line_items),
    )
    return SimpleNamespace(
        document=SimpleNamespace(inference=SimpleNamespace(prediction=prediction))
    )


def extract_with(result):
    extractor = MindeeReceiptExtractor(api_key="test-key")
    extractor._parse = lambda upload: result
    upload = ReceiptUpload(filename="r.jpg", content=b"img")
    return asyncio.run(extractor.extract(upload))


class TestGuessCategory:
    """Tests for keyword categorization."""

    @pytest.mark.parametrize("merchant, expected", [
        ("McDonald's #123", Category.FOOD),
        ("Metro Transit", Category.TRANSPORTATION),
        ("CVS Pharmacy", Category.PERSONAL_CARE),
        ("Campus Bookstore", Category.SCHOOL_SUPPLIES),
        ("Old Navy", Category.CLOTHING),
        ("AMC Theatres", Category.ENTERTAINMENT),
        ("Bob's Emporium", Category.OTHER),
        ("", Category.OTHER),
    ])
    def test_keywords(self, merchant, expected):
        assert guess_category(merchant) == expected

    def test_merchant_beats_ocr_category(self):
        assert guess_category("Shell", "food") == Category.TRANSPORTATION

    def test_ocr_category_fallback(self):
        assert guess_category("Bob's Emporium", "Gasoline") == Category.TRANSPORTATION
        assert guess_category("Bob's Emporium", "unknown") == Category.OTHER


class TestMindeeReceiptExtractor:
    """Parsing tests with the Mindee call replaced by a canned response."""

    def test_parses_prediction(self):
        items = [
            SimpleNamespace(description="Latte", total_amount=5.5),
            SimpleNamespace(description=None, total_amount=6.8),
            SimpleNamespace(description="Refund", total_amount=-1.0),
        ]
        receipt = extract_with(mindee_result(line_items=items))

        assert receipt.merchant == "Starbucks"
        assert receipt.amount == Decimal("12.30")
        assert receipt.date == date(2026, 10, 12)
        assert receipt.category == Category.FOOD
        assert [(i.name, i.price) for i in receipt.line_items] == [
            ("Latte", Decimal("5.50")),
            ("Item", Decimal("6.80")),
        ]
        assert receipt.source_reference == "r.jpg"

    def test_low_confidence_rejected(self):
        with pytest.raises(ExtractionFailedError, match="doesn't appear to be a receipt"):
            extract_with(mindee_result(confidence=0.1))

    def test_missing_total_rejected(self):
        with pytest.raises(ExtractionFailedError, match="merchant and total"):
            extract_with(mindee_result(total=None))

    def test_service_error_wrapped(self):
        extractor = MindeeReceiptExtractor(api_key="test-key")

        def boom(upload):
            raise ConnectionError("offline")

        extractor._parse = boom
        upload = ReceiptUpload(filename="r.jpg", content=b"img")
        with pytest.raises(ExtractionFailedError, match="offline"):
            asyncio.run(extractor.extract(upload))

    def test_malformed_response_rejected(self):
        with pytest.raises(ExtractionFailedError, match="Unexpected receipt service response"):
            extract_with(SimpleNamespace(document=None))

    @pytest.mark.parametrize("value, expected", [
        ("2026-10-01", date(2026, 10, 1)),
        ("10/01/2026", date(2026, 10, 1)),
        (date(2026, 10, 1), date(2026, 10, 1)),
        ("yesterday", None),
        (None, None),
    ])
    def test_safe_date(self, value, expected):
        assert MindeeReceiptExtractor(api_key="k")._safe_date(value) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
