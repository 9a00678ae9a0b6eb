"""
Streamlit Frontend for Stipend Tracker

This is the screen students use to track their stipend, upload
receipts, save toward goals and download reports.

DESIGN PRINCIPLES:
1. The UI is a thin consumer: every rule lives in stipend_tracker
2. Clear error messages in simple language
3. Visual feedback for all operations

Run with:
    streamlit run app/main.py
"""

import asyncio
from datetime import date

import streamlit as st

from stipend_tracker.config import validate_all_settings
from stipend_tracker.models.ledger import (
    WORKSHOP_CATALOG,
    Category,
    ReceiptUpload,
    TransactionKind,
)
from stipend_tracker.orchestrator import AppComponents, create_app_components
from stipend_tracker.pipeline import PipelineBusyError, UploadRejectedError
from stipend_tracker.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Stipend Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

SEVERITY_BOX = {
    "warning": st.warning,
    "tip": st.info,
    "success": st.success,
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    components = get_components()
    ledger = components.ledger

    st.sidebar.title("💰 Stipend Tracker")
    if ledger.display_name:
        st.sidebar.markdown(f"Hi, **{ledger.display_name}**!")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "💸 Transactions",
            "🧾 Receipts",
            "🎯 Goals",
            "🎓 Workshops",
            "📥 Reports",
            "⚙️ Settings",
        ],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard_page(components)
    elif page == "💸 Transactions":
        render_transactions_page(components)
    elif page == "🧾 Receipts":
        render_receipts_page(components)
    elif page == "🎯 Goals":
        render_goals_page(components)
    elif page == "🎓 Workshops":
        render_workshops_page(components)
    elif page == "📥 Reports":
        render_reports_page(components)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_dashboard_page(components: AppComponents):
    st.title("📊 Dashboard")
    dashboard = components.dashboard.build()
    summary = dashboard.summary

    col1, col2, col3 = st.columns(3)
    col1.metric("Current Balance", f"${summary.balance:,.2f}")
    col2.metric("Total Spent", f"${summary.total_expense:,.2f}")
    col3.metric("Monthly Stipend", f"${summary.stipend:,.2f}")

    if summary.stipend_used_percent is not None:
        st.progress(
            min(float(summary.stipend_used_percent) / 100, 1.0),
            text=f"{summary.stipend_used_percent:.0f}% of stipend used",
        )

    st.subheader("Last 7 days")
    st.bar_chart({point.label: float(point.amount) for point in dashboard.daily_net})

    if dashboard.top_categories:
        st.subheader("Top spending categories")
        for category, amount in dashboard.top_categories:
            st.markdown(f"- **{category.value}**: ${amount:,.2f}")

    st.subheader("Recommendations")
    for recommendation in dashboard.recommendations:
        show = SEVERITY_BOX.get(recommendation.severity.value, st.info)
        show(f"**{recommendation.title}** - {recommendation.message}\n\n👉 {recommendation.action}")


def render_transactions_page(components: AppComponents):
    st.title("💸 Transactions")
    ledger = components.ledger

    with st.form("add_transaction", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            description = st.text_input("Description *")
            amount = st.text_input("Amount *", placeholder="12.50")
        with col2:
            kind = st.selectbox(
                "Type",
                options=list(TransactionKind),
                index=1,
                format_func=lambda k: k.value.title(),
            )
            category = st.selectbox("Category", options=list(Category), format_func=lambda c: c.value)
        on_date = st.date_input("Date", value=date.today())
        goal_options = [None] + ledger.goals()
        goal = st.selectbox(
            "Savings goal (Savings only)",
            options=goal_options,
            format_func=lambda g: "None" if g is None else g.name,
        )

        if st.form_submit_button("Add Transaction", type="primary"):
            try:
                ledger.add_transaction(
                    description,
                    amount,
                    category,
                    kind=kind,
                    date=on_date,
                    goal_id=goal.id if goal else None,
                )
                st.success("Transaction added")
            except ValidationError as e:
                st.error(f"Please check **{e.field}**: {e.message}")

    st.markdown("---")
    transactions = ledger.transactions(newest_first=True)
    if not transactions:
        st.info("No transactions yet. Add your first one above.")
    for t in transactions:
        col1, col2, col3 = st.columns([5, 2, 1])
        sign = "+" if t.is_income else "-"
        receipt = " 📎" if t.has_receipt else ""
        col1.markdown(f"**{t.description}**{receipt}  \n{t.category.value} · {t.date.isoformat()}")
        col2.markdown(f"{sign}${t.amount:,.2f}")
        if col3.button("🗑️", key=f"remove_{t.id}"):
            ledger.remove_transaction(t.id)
            st.rerun()


def render_receipts_page(components: AppComponents):
    st.title("🧾 Receipts")
    st.markdown("Upload a photo of a receipt and we'll add the expense for you.")

    uploaded_file = st.file_uploader(
        "Choose a receipt photo",
        type=["jpg", "jpeg", "png", "webp"],
    )
    if uploaded_file and st.button("🔍 Process Receipt", type="primary"):
        with st.spinner("Reading your receipt... Please wait."):
            try:
                result = run_async(components.pipeline.submit(ReceiptUpload(
                    filename=uploaded_file.name,
                    content=uploaded_file.getvalue(),
                    mime_type=uploaded_file.type or "image/jpeg",
                )))
            except (PipelineBusyError, UploadRejectedError) as e:
                st.error(str(e))
            else:
                if result.success:
                    st.success(result.message)
                else:
                    st.error(result.message)

    st.markdown("---")
    receipts = components.ledger.receipts()
    if not receipts:
        st.info("No receipts yet.")
    for receipt in reversed(receipts):
        with st.expander(f"{receipt.merchant} - ${receipt.amount:,.2f} ({receipt.date.isoformat()})"):
            st.markdown(f"**Category:** {receipt.category.value}")
            for item in receipt.line_items:
                st.markdown(f"- {item.name}: ${item.price:,.2f}")


def render_goals_page(components: AppComponents):
    st.title("🎯 Goals")
    ledger = components.ledger

    with st.form("add_goal", clear_on_submit=True):
        name = st.text_input("Goal name *", placeholder="New laptop")
        target = st.text_input("Target amount *", placeholder="500")
        deadline = st.date_input("Deadline (optional)", value=None)
        if st.form_submit_button("Add Goal", type="primary"):
            try:
                ledger.add_goal(name, target, deadline)
                st.success("Goal added")
            except ValidationError as e:
                st.error(f"Please check **{e.field}**: {e.message}")

    st.markdown("---")
    for progress in components.dashboard.build().goals:
        goal = progress.goal
        st.markdown(f"**{goal.name}**")
        st.progress(
            float(progress.display_percent) / 100,
            text=f"${progress.saved:,.2f} / ${goal.target_amount:,.2f} ({progress.percent:.0f}%)",
        )
        if goal.deadline:
            st.caption(f"Target: {goal.deadline.isoformat()}")
        if st.button("Remove", key=f"remove_goal_{goal.id}"):
            ledger.remove_goal(goal.id)
            st.rerun()


def render_workshops_page(components: AppComponents):
    st.title("🎓 Workshops")
    ledger = components.ledger
    attended = set(ledger.attended_workshops())

    st.markdown(f"**{len(attended)} of {len(WORKSHOP_CATALOG)}** workshops attended")
    for workshop in WORKSHOP_CATALOG:
        checked = st.checkbox(workshop, value=workshop in attended, key=f"workshop_{workshop}")
        if checked != (workshop in attended):
            ledger.toggle_workshop(workshop)
            st.rerun()


def render_reports_page(components: AppComponents):
    st.title("📥 Reports")
    exports = components.exports

    csv_file = exports.export_csv()
    st.download_button(
        "⬇️ Download transactions (CSV)",
        data=csv_file.content,
        file_name=csv_file.filename,
        mime=csv_file.media_type,
    )

    html_file = exports.export_html()
    st.download_button(
        "⬇️ Download report (HTML)",
        data=html_file.content,
        file_name=html_file.filename,
        mime=html_file.media_type,
    )

    pdf_file = exports.export_pdf()
    st.download_button(
        "⬇️ Download report (PDF)",
        data=pdf_file.content,
        file_name=pdf_file.filename,
        mime=pdf_file.media_type,
    )


def render_settings_page(components: AppComponents):
    st.title("⚙️ Settings")
    ledger = components.ledger

    with st.form("profile"):
        display_name = st.text_input("Your name", value=ledger.display_name or "")
        stipend = st.text_input("Monthly stipend", value=f"{ledger.stipend:.2f}")
        if st.form_submit_button("Save", type="primary"):
            try:
                ledger.set_display_name(display_name or None)
                ledger.set_stipend(stipend)
                st.success("Saved")
            except ValidationError as e:
                st.error(f"Please check **{e.field}**: {e.message}")

    st.markdown("### Connection Status")
    status = validate_all_settings()
    services = [
        ("Mindee (Receipt OCR)", "mindee"),
        ("Google Sheets (Storage)", "google_sheets"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
