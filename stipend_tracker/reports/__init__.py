"""CSV and document report export."""

from stipend_tracker.reports.csv_export import (
    CSV_HEADERS,
    csv_filename,
    transactions_to_csv,
)
from stipend_tracker.reports.document import (
    CategoryBar,
    ReportData,
    bar_width,
    build_report,
    render_html_report,
    report_filename,
)
from stipend_tracker.reports.pdf import render_pdf_report

__all__ = [
    "CSV_HEADERS",
    "CategoryBar",
    "ReportData",
    "bar_width",
    "build_report",
    "csv_filename",
    "render_html_report",
    "render_pdf_report",
    "report_filename",
    "transactions_to_csv",
]
