"""
PDF Report

Renders a ReportData with fpdf2. Same sections as the HTML report,
laid out for printing.

The built-in PDF fonts only cover Latin-1, so any other character
(emoji, most non-Latin scripts) is replaced with '?'.
"""

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from stipend_tracker.analytics.aggregation import whole_percent
from stipend_tracker.reports.document import ReportData


FONT = "Helvetica"
LINE = 8
BAR_MAX_WIDTH = 100
BRAND_RGB = (79, 70, 229)


def _latin1(text: str) -> str:
    return text.encode("latin-1", "replace").decode("latin-1")


class _ReportPDF(FPDF):
    def line_of_text(self, text: str, size: int = 11, style: str = "") -> None:
        self.set_font(FONT, style, size)
        self.cell(0, LINE, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def section_heading(self, text: str) -> None:
        self.ln(4)
        self.set_text_color(*BRAND_RGB)
        self.line_of_text(text, size=14, style="B")
        self.set_text_color(0, 0, 0)


def render_pdf_report(report: ReportData) -> bytes:
    pdf = _ReportPDF()
    pdf.set_title(_latin1(f"Financial Report - {report.owner_name}"))
    pdf.add_page()

    pdf.set_text_color(*BRAND_RGB)
    pdf.line_of_text(f"{report.owner_name}'s Financial Report", size=18, style="B")
    pdf.set_text_color(0, 0, 0)
    pdf.line_of_text(report.title, size=10)
    pdf.line_of_text(f"Report Generated: {report.generated_on_label}", size=10)

    pdf.section_heading("Summary")
    pdf.line_of_text(f"Current Balance: {report.money(report.balance)}")
    pdf.line_of_text(f"Total Spent: {report.money(report.total_spent)}")
    pdf.line_of_text(f"Monthly Stipend: {report.money(report.stipend)}")

    pdf.section_heading("Spending by Category")
    if not report.category_bars:
        pdf.line_of_text("No spending recorded yet.")
    for bar in report.category_bars:
        pdf.set_font(FONT, "", 11)
        pdf.cell(45, LINE, _latin1(bar.category.value))
        x, y = pdf.get_x(), pdf.get_y()
        pdf.set_fill_color(229, 231, 235)
        pdf.rect(x, y + 2, BAR_MAX_WIDTH, LINE - 4, style="F")
        width = float(bar.width_percent) / 100 * BAR_MAX_WIDTH
        if width > 0:
            pdf.set_fill_color(*BRAND_RGB)
            pdf.rect(x, y + 2, width, LINE - 4, style="F")
        pdf.set_x(x + BAR_MAX_WIDTH + 5)
        pdf.cell(0, LINE, _latin1(report.money(bar.amount)), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.section_heading("Recent Transactions")
    if not report.recent_transactions:
        pdf.line_of_text("No transactions yet.")
    for t in report.recent_transactions:
        sign = "+" if t.is_income else "-"
        receipt = " [receipt]" if t.has_receipt else ""
        pdf.line_of_text(
            f"{t.date.isoformat()}  {t.category.value}{receipt}  "
            f"{t.description}  {sign}{report.money(t.amount)}",
            size=10,
        )

    if report.goals:
        pdf.section_heading("Financial Goals")
        for progress in report.goals:
            goal = progress.goal
            deadline = f" - Target: {goal.deadline.isoformat()}" if goal.deadline else ""
            pdf.line_of_text(goal.name, style="B")
            pdf.line_of_text(
                f"{report.money(progress.saved)} / {report.money(goal.target_amount)} "
                f"({whole_percent(progress.percent)}% complete){deadline}",
                size=10,
            )

    pdf.section_heading("Workshops Completed")
    pdf.line_of_text(
        f"{len(report.workshops_attended)} of {report.workshops_total} workshops attended"
    )
    for name in report.workshops_attended:
        pdf.line_of_text(f"- {name}", size=10)

    if report.recommendations:
        pdf.section_heading("Recommendations")
        for r in report.recommendations:
            pdf.line_of_text(r.title, style="B")
            pdf.set_font(FONT, "", 10)
            pdf.multi_cell(0, 6, _latin1(f"{r.message} {r.action}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    return bytes(pdf.output())
