"""Tests for the CSV and document exports."""

import pytest
from datetime import date
from decimal import Decimal

from stipend_tracker.config import ReportSettings
from stipend_tracker.models import Category, LedgerSnapshot, Transaction
from stipend_tracker.reports import (
    CSV_HEADERS,
    bar_width,
    build_report,
    csv_filename,
    render_html_report,
    render_pdf_report,
    report_filename,
    transactions_to_csv,
)
from stipend_tracker.validation import ValidationError


TODAY = date(2026, 10, 19)


@pytest.fixture
def populated(ledger):
    """Two expenses, one rejected Savings income, a goal and a workshop."""
    ledger.add_transaction("Lunch", "12.50", "Food", date="2026-10-18")
    with pytest.raises(ValidationError):
        ledger.add_transaction("Savings", "0", "Savings", kind="income")
    ledger.add_transaction("Bus, round trip", "4.00", "Transportation", date="2026-10-19")
    goal = ledger.add_goal("Laptop", "500", "2026-12-31")
    ledger.add_transaction("Laptop fund", "50", "Savings", goal_id=goal.id)
    ledger.toggle_workshop("Banking & Credit")
    ledger.set_stipend("300")
    return ledger


class TestCsvExport:
    """Tests for transactions_to_csv."""

    def test_rejected_add_never_reaches_export(self, ledger):
        """Only accepted transactions are exported."""
        ledger.add_transaction("Lunch", "12.50", "Food", date="2026-10-18")
        with pytest.raises(ValidationError):
            ledger.add_transaction("Savings", "0", "Savings", kind="income")
        ledger.add_transaction("Bus", "4", "Transportation", date="2026-10-19")

        lines = transactions_to_csv(ledger.snapshot()).split("\n")
        assert lines == [
            "Date,Type,Category,Description,Amount,Has Receipt",
            '"2026-10-18","expense","Food","Lunch","12.50","No"',
            '"2026-10-19","expense","Transportation","Bus","4.00","No"',
        ]

    def test_header_only_for_empty_ledger(self):
        assert transactions_to_csv(LedgerSnapshot()) == ",".join(CSV_HEADERS)

    def test_commas_and_quotes_are_escaped(self):
        """Descriptions with commas and quotes stay in one cell."""
        snapshot = LedgerSnapshot(transactions=(
            Transaction(
                description='Pens, "gel" kind',
                amount=Decimal("3.00"),
                category=Category.SCHOOL_SUPPLIES,
                date=TODAY,
                has_receipt=True,
                receipt_id="r1",
            ),
        ))
        row = transactions_to_csv(snapshot).split("\n")[1]
        assert row == '"2026-10-19","expense","School Supplies","Pens, ""gel"" kind","3.00","Yes"'

    @pytest.mark.parametrize("name, expected", [
        ("Sam", "Sam_transactions_2026-10-19.csv"),
        (None, "Student_transactions_2026-10-19.csv"),
        ("  ", "Student_transactions_2026-10-19.csv"),
        ("Ana María/../x", "Ana_María_x_transactions_2026-10-19.csv"),
    ])
    def test_csv_filename(self, name, expected):
        assert csv_filename(name, TODAY) == expected


class TestDocumentReport:
    """Tests for build_report and the HTML renderer."""

    def test_report_figures(self, populated):
        report = build_report(populated.snapshot(), today=TODAY)
        assert report.owner_name == "Student"
        assert report.total_spent == Decimal("66.50")
        assert report.balance == Decimal("233.50")
        assert report.stipend == Decimal("300.00")
        assert [bar.category for bar in report.category_bars] == [
            Category.FOOD, Category.TRANSPORTATION, Category.SAVINGS
        ]
        assert round(sum(bar.width_percent for bar in report.category_bars), 6) == 100
        assert report.workshops_attended == ("Banking & Credit",)
        assert report.goals[0].saved == Decimal("50.00")

    def test_recent_transactions_newest_first(self, populated):
        report = build_report(
            populated.snapshot(), today=TODAY, settings=ReportSettings(recent_transactions=2)
        )
        assert [t.description for t in report.recent_transactions] == [
            "Laptop fund", "Bus, round trip"
        ]

    def test_report_is_deterministic(self, populated):
        """Same snapshot and date, same document."""
        snapshot = populated.snapshot()
        first = render_html_report(build_report(snapshot, today=TODAY))
        second = render_html_report(build_report(snapshot, today=TODAY))
        assert first == second

    def test_html_sections(self, populated):
        populated.set_display_name("Sam")
        html = render_html_report(build_report(populated.snapshot(), today=TODAY))
        assert "<style>" in html
        assert "Sam's Financial Report" in html
        assert "Report Generated: October 19, 2026" in html
        assert "$233.50" in html
        assert "$50.00 / $500.00 (10% complete) • Target: 2026-12-31" in html
        assert "1 of 6" in html
        assert "Banking &amp; Credit" in html

    def test_html_escapes_user_text(self, ledger):
        ledger.set_display_name("<b>Sam</b>")
        ledger.add_transaction("<script>alert(1)</script>", "2", "Other")
        html = render_html_report(build_report(ledger.snapshot(), today=TODAY))
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;Sam&lt;/b&gt;" in html

    def test_no_spending_has_no_nan(self, ledger):
        """Zero total spend gives zero-width bars, not NaN."""
        assert bar_width(Decimal("0"), Decimal("0")) == 0
        ledger.add_transaction("Paycheck", "100", "Other", kind="income")
        html = render_html_report(build_report(ledger.snapshot(), today=TODAY))
        assert "NaN" not in html
        assert "No spending recorded yet." in html

    @pytest.mark.parametrize("extension", ["html", "pdf", ".pdf"])
    def test_report_filename(self, extension):
        expected = f"Sam_financial_report_2026-10-19.{extension.lstrip('.')}"
        assert report_filename("Sam", TODAY, extension) == expected


class TestPdfReport:
    """Tests for the PDF renderer."""

    def test_pdf_document(self, populated):
        populated.set_display_name("Zoë 🎓")
        pdf = render_pdf_report(build_report(populated.snapshot(), today=TODAY))
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 500

    def test_empty_ledger_pdf(self, ledger):
        pdf = render_pdf_report(build_report(ledger.snapshot(), today=TODAY))
        assert pdf.startswith(b"%PDF")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
