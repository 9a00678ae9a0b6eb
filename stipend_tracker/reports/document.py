"""
Document Report

DESIGN DECISION: The report is built in two steps:
1. build_report() computes every figure once into an immutable ReportData
2. Renderers (HTML here, PDF in reports.pdf) only format ReportData

So the HTML and PDF versions of a report can never disagree, and
the renderers stay free of business logic.

Determinism: the same snapshot, date and settings always give the same
ReportData and the same HTML.
"""

from datetime import date
from decimal import Decimal
from html import escape
from typing import Optional

from pydantic import BaseModel, ConfigDict

from stipend_tracker.analytics.aggregation import (
    balance,
    category_breakdown,
    total_expense,
    whole_percent,
)
from stipend_tracker.analytics.goals import GoalTracker
from stipend_tracker.analytics.recommendations import RecommendationEngine
from stipend_tracker.config.settings import ReportSettings
from stipend_tracker.models.insights import GoalProgress, Recommendation
from stipend_tracker.models.ledger import (
    WORKSHOP_CATALOG,
    Category,
    LedgerSnapshot,
    Transaction,
)
from stipend_tracker.reports.csv_export import DEFAULT_OWNER_NAME, safe_owner_name


ZERO = Decimal("0")
HUNDRED = Decimal("100")


class CategoryBar(BaseModel):
    """One bar of the spending-by-category chart."""
    model_config = ConfigDict(frozen=True)

    category: Category
    amount: Decimal
    width_percent: Decimal


class ReportData(BaseModel):
    """Everything a rendered report shows, already computed."""
    model_config = ConfigDict(frozen=True)

    title: str
    owner_name: str
    generated_on: date
    currency_symbol: str = "$"

    balance: Decimal
    total_spent: Decimal
    stipend: Decimal

    category_bars: tuple[CategoryBar, ...] = ()
    recent_transactions: tuple[Transaction, ...] = ()
    goals: tuple[GoalProgress, ...] = ()
    workshops_attended: tuple[str, ...] = ()
    workshops_total: int = len(WORKSHOP_CATALOG)
    recommendations: tuple[Recommendation, ...] = ()

    def money(self, amount: Decimal) -> str:
        return f"{self.currency_symbol}{amount:.2f}"

    @property
    def generated_on_label(self) -> str:
        """e.g. 'October 19, 2026'"""
        return f"{self.generated_on:%B} {self.generated_on.day}, {self.generated_on.year}"


def bar_width(amount: Decimal, total: Decimal) -> Decimal:
    """Share of total as a percentage; 0 when there is no spending at all."""
    if total <= 0:
        return ZERO
    return amount / total * HUNDRED


def build_report(
    snapshot: LedgerSnapshot,
    today: Optional[date] = None,
    settings: Optional[ReportSettings] = None,
    goal_tracker: Optional[GoalTracker] = None,
    recommendation_engine: Optional[RecommendationEngine] = None,
) -> ReportData:
    settings = settings or ReportSettings()
    goal_tracker = goal_tracker or GoalTracker()
    recommendation_engine = recommendation_engine or RecommendationEngine(
        currency_symbol=settings.currency_symbol
    )

    spent = total_expense(snapshot)
    bars = tuple(
        CategoryBar(category=category, amount=amount, width_percent=bar_width(amount, spent))
        for category, amount in category_breakdown(snapshot).items()
    )

    return ReportData(
        title=settings.title,
        owner_name=snapshot.display_name or DEFAULT_OWNER_NAME,
        generated_on=today or date.today(),
        currency_symbol=settings.currency_symbol,
        balance=balance(snapshot),
        total_spent=spent,
        stipend=snapshot.stipend,
        category_bars=bars,
        recent_transactions=tuple(
            snapshot.transactions_newest_first()[:settings.recent_transactions]
        ),
        goals=tuple(goal_tracker.progress(snapshot)),
        workshops_attended=snapshot.workshops,
        recommendations=tuple(recommendation_engine.evaluate(snapshot)),
    )


def report_filename(display_name: Optional[str], today: date, extension: str = "html") -> str:
    return f"{safe_owner_name(display_name)}_financial_report_{today.isoformat()}.{extension.lstrip('.')}"


# =============================================================================
# HTML RENDERING
# =============================================================================

_STYLE = """
    body { font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 40px 20px; color: #333; }
    .header { text-align: center; margin-bottom: 40px; border-bottom: 3px solid #4F46E5; padding-bottom: 20px; }
    .header h1 { color: #4F46E5; margin: 0; font-size: 28px; }
    .header p { color: #666; margin: 5px 0; }
    .summary-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 20px; margin-bottom: 30px; }
    .summary-card { background: #F3F4F6; padding: 20px; border-radius: 8px; text-align: center; }
    .summary-card h3 { margin: 0 0 10px 0; color: #666; font-size: 14px; text-transform: uppercase; }
    .summary-card .amount { font-size: 28px; font-weight: bold; color: #1F2937; }
    .section { margin-bottom: 30px; }
    .section h2 { color: #4F46E5; border-bottom: 2px solid #E5E7EB; padding-bottom: 10px; margin-bottom: 20px; }
    table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
    th, td { padding: 12px; text-align: left; border-bottom: 1px solid #E5E7EB; }
    th { background: #F9FAFB; font-weight: bold; color: #374151; }
    .expense { color: #DC2626; }
    .income { color: #059669; }
    .category-bar { display: flex; align-items: center; margin-bottom: 15px; }
    .category-name { width: 150px; font-weight: 500; }
    .bar-container { flex: 1; height: 25px; background: #E5E7EB; border-radius: 4px; overflow: hidden; margin: 0 10px; }
    .bar-fill { height: 100%; background: linear-gradient(to right, #4F46E5, #7C3AED); }
    .bar-amount { width: 80px; text-align: right; font-weight: bold; }
    .goals-list { list-style: none; padding: 0; }
    .goals-list li { background: #F3F4F6; padding: 15px; margin-bottom: 10px; border-radius: 6px; }
    .goal-name { font-weight: bold; color: #1F2937; }
    .goal-progress { color: #4F46E5; font-size: 14px; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 2px solid #E5E7EB; text-align: center; color: #6B7280; font-size: 12px; }
"""


def _summary_card(label: str, value: str) -> str:
    return (
        '<div class="summary-card">'
        f"<h3>{escape(label)}</h3>"
        f'<div class="amount">{escape(value)}</div>'
        "</div>"
    )


def _category_section(report: ReportData) -> str:
    rows = []
    for bar in report.category_bars:
        rows.append(
            '<div class="category-bar">'
            f'<div class="category-name">{escape(bar.category.value)}</div>'
            '<div class="bar-container">'
            f'<div class="bar-fill" style="width: {bar.width_percent:.1f}%"></div>'
            "</div>"
            f'<div class="bar-amount">{escape(report.money(bar.amount))}</div>'
            "</div>"
        )
    if not rows:
        rows.append("<p>No spending recorded yet.</p>")
    return '<div class="section"><h2>Spending by Category</h2>' + "".join(rows) + "</div>"


def _transactions_section(report: ReportData) -> str:
    rows = []
    for t in report.recent_transactions:
        sign = "+" if t.is_income else "-"
        marker = " 📎" if t.has_receipt else ""
        rows.append(
            "<tr>"
            f"<td>{t.date.isoformat()}</td>"
            f"<td>{escape(t.category.value)}{marker}</td>"
            f"<td>{escape(t.description)}</td>"
            f'<td class="{t.kind.value}">{sign}{escape(report.money(t.amount))}</td>'
            "</tr>"
        )
    return (
        '<div class="section"><h2>Recent Transactions</h2>'
        "<table><thead><tr>"
        "<th>Date</th><th>Category</th><th>Description</th><th>Amount</th>"
        "</tr></thead><tbody>"
        + "".join(rows)
        + "</tbody></table></div>"
    )


def _goals_section(report: ReportData) -> str:
    if not report.goals:
        return ""
    items = []
    for progress in report.goals:
        goal = progress.goal
        deadline = f" • Target: {goal.deadline.isoformat()}" if goal.deadline else ""
        items.append(
            "<li>"
            f'<div class="goal-name">{escape(goal.name)}</div>'
            '<div class="goal-progress">'
            f"{escape(report.money(progress.saved))} / {escape(report.money(goal.target_amount))} "
            f"({whole_percent(progress.percent)}% complete){deadline}"
            "</div>"
            "</li>"
        )
    return (
        '<div class="section"><h2>Financial Goals</h2>'
        '<ul class="goals-list">' + "".join(items) + "</ul></div>"
    )


def _workshops_section(report: ReportData) -> str:
    attended = report.workshops_attended
    names = ""
    if attended:
        names = f'<p style="color: #059669;">✓ {escape(", ".join(attended))}</p>'
    return (
        '<div class="section"><h2>Workshops Completed</h2>'
        f"<p><strong>{len(attended)} of {report.workshops_total}</strong> workshops attended</p>"
        f"{names}</div>"
    )


def _recommendations_section(report: ReportData) -> str:
    if not report.recommendations:
        return ""
    items = "".join(
        f"<li><strong>{escape(r.title)}</strong>: {escape(r.message)} "
        f"<em>{escape(r.action)}</em></li>"
        for r in report.recommendations
    )
    return f'<div class="section"><h2>Recommendations</h2><ul>{items}</ul></div>'


def render_html_report(report: ReportData) -> str:
    """Render a self-contained HTML document (styles embedded, no external assets)."""
    owner = escape(report.owner_name)
    title = escape(report.title)
    summary = "".join((
        _summary_card("Current Balance", report.money(report.balance)),
        _summary_card("Total Spent", report.money(report.total_spent)),
        _summary_card("Monthly Stipend", report.money(report.stipend)),
    ))
    return (
        "<!DOCTYPE html>\n"
        '<html>\n<head>\n<meta charset="utf-8">\n'
        f"<title>Financial Report - {owner}</title>\n"
        f"<style>{_STYLE}</style>\n"
        "</head>\n<body>\n"
        '<div class="header">'
        f"<h1>{owner}'s Financial Report</h1>"
        f"<p>{title}</p>"
        f"<p>Report Generated: {escape(report.generated_on_label)}</p>"
        "</div>\n"
        f'<div class="summary-grid">{summary}</div>\n'
        f"{_category_section(report)}\n"
        f"{_transactions_section(report)}\n"
        f"{_goals_section(report)}\n"
        f"{_workshops_section(report)}\n"
        f"{_recommendations_section(report)}\n"
        '<div class="footer">'
        f"<p>This report was generated by {title}</p>"
        "<p>Keep tracking, keep growing!</p>"
        "</div>\n"
        "</body>\n</html>\n"
    )
