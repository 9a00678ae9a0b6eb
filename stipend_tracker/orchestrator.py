"""
Main Orchestrator for Stipend Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Dashboard (snapshot → aggregates, goal progress, recommendations)
2. Export (snapshot → CSV / HTML / PDF file, audited)

Receipt ingestion has its own state machine in stipend_tracker.pipeline;
the factory here only wires it up.

DESIGN DECISION: Every flow reads ONE snapshot and computes from it.
Nothing here caches derived figures, so what the user sees always
matches the ledger at the moment they asked.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict

from stipend_tracker.analytics import (
    GoalTracker,
    RecommendationEngine,
    summarize,
    top_categories,
    trailing_daily_net,
)
from stipend_tracker.audit import AuditLogger
from stipend_tracker.config import AppSettings, LedgerSettings, ReportSettings, Settings, get_settings
from stipend_tracker.ledger import LedgerStore
from stipend_tracker.models.audit import AuditEventBuilder
from stipend_tracker.models.insights import Dashboard
from stipend_tracker.pipeline import ReceiptIngestionPipeline
from stipend_tracker.reports import (
    build_report,
    csv_filename,
    render_html_report,
    render_pdf_report,
    report_filename,
    transactions_to_csv,
)
from stipend_tracker.services.extraction import ReceiptExtractor, SimulatedReceiptExtractor
from stipend_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)


logger = structlog.get_logger(__name__)


class DashboardFlow:
    """Computes the overview screen from the current ledger."""

    def __init__(
        self,
        ledger: LedgerStore,
        goal_tracker: GoalTracker,
        recommendation_engine: RecommendationEngine,
        app_settings: Optional[AppSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self._ledger = ledger
        self._goal_tracker = goal_tracker
        self._recommendation_engine = recommendation_engine
        self._app_settings = app_settings or AppSettings()
        self._today = today

    def build(self) -> Dashboard:
        snapshot = self._ledger.snapshot()
        return Dashboard(
            summary=summarize(snapshot),
            top_categories=tuple(
                top_categories(snapshot, self._app_settings.top_categories_limit)
            ),
            daily_net=tuple(trailing_daily_net(
                snapshot,
                window_days=self._app_settings.trend_window_days,
                today=self._today(),
            )),
            goals=tuple(self._goal_tracker.progress(snapshot)),
            recommendations=tuple(self._recommendation_engine.evaluate(snapshot)),
        )


class ExportedFile(BaseModel):
    """A generated file, ready to be downloaded or written to disk."""
    model_config = ConfigDict(frozen=True)

    filename: str
    media_type: str
    content: bytes


class ExportFlow:
    """
    Produces the downloadable exports.

    Every successful export is recorded in the audit log.
    """

    def __init__(
        self,
        ledger: LedgerStore,
        goal_tracker: GoalTracker,
        recommendation_engine: RecommendationEngine,
        audit_logger: Optional[AuditLogger] = None,
        report_settings: Optional[ReportSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self._ledger = ledger
        self._goal_tracker = goal_tracker
        self._recommendation_engine = recommendation_engine
        self._audit_logger = audit_logger or AuditLogger()
        self._report_settings = report_settings or ReportSettings()
        self._today = today

    def _audited(self, exported: ExportedFile, report_format: str, row_count: int) -> ExportedFile:
        self._audit_logger.log(AuditEventBuilder.report_exported(
            report_format=report_format,
            filename=exported.filename,
            row_count=row_count,
        ))
        return exported

    def export_csv(self) -> ExportedFile:
        snapshot = self._ledger.snapshot()
        exported = ExportedFile(
            filename=csv_filename(snapshot.display_name, self._today()),
            media_type="text/csv",
            content=transactions_to_csv(snapshot).encode("utf-8"),
        )
        return self._audited(exported, "csv", len(snapshot.transactions))

    def _report(self):
        snapshot = self._ledger.snapshot()
        report = build_report(
            snapshot,
            today=self._today(),
            settings=self._report_settings,
            goal_tracker=self._goal_tracker,
            recommendation_engine=self._recommendation_engine,
        )
        return snapshot, report

    def export_html(self) -> ExportedFile:
        snapshot, report = self._report()
        exported = ExportedFile(
            filename=report_filename(snapshot.display_name, report.generated_on, "html"),
            media_type="text/html",
            content=render_html_report(report).encode("utf-8"),
        )
        return self._audited(exported, "html", len(report.recent_transactions))

    def export_pdf(self) -> ExportedFile:
        snapshot, report = self._report()
        exported = ExportedFile(
            filename=report_filename(snapshot.display_name, report.generated_on, "pdf"),
            media_type="application/pdf",
            content=render_pdf_report(report),
        )
        return self._audited(exported, "pdf", len(report.recent_transactions))


@dataclass
class AppComponents:
    """Everything a front end needs, wired together."""
    ledger: LedgerStore
    pipeline: ReceiptIngestionPipeline
    dashboard: DashboardFlow
    exports: ExportFlow
    audit_logger: AuditLogger


def create_key_value_store(
    settings: LedgerSettings,
) -> tuple[KeyValueStore, Optional[AuditStorageInterface]]:
    """
    Build the configured ledger store and, where the backend has one,
    its audit storage.
    """
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore(), None

    if settings.storage_backend == "google_sheets":
        # gspread and google-auth are only needed for this backend
        from stipend_tracker.services.storage.google_sheets import (
            GoogleSheetsAuditStorage,
            GoogleSheetsClient,
            GoogleSheetsKeyValueStore,
        )

        sheets_client = GoogleSheetsClient()
        return GoogleSheetsKeyValueStore(sheets_client), GoogleSheetsAuditStorage(sheets_client)

    return JsonFileKeyValueStore(settings.data_file), None


def create_extractor(app_settings: AppSettings) -> ReceiptExtractor:
    if app_settings.extraction_backend == "mindee":
        from stipend_tracker.services.extraction.mindee_service import MindeeReceiptExtractor

        return MindeeReceiptExtractor()
    return SimulatedReceiptExtractor(delay_seconds=app_settings.simulated_extraction_delay_seconds)


def create_app_components(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    extractor: Optional[ReceiptExtractor] = None,
    audit_logger: Optional[AuditLogger] = None,
    today: Callable[[], date] = date.today,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to get_settings())
        store: Key-value store override, e.g. an in-memory one for tests.
               When given, the configured storage backend is ignored.
        extractor: Receipt extractor override
        audit_logger: Audit logger override
        today: Clock used for dates and report file names
    """
    settings = settings or get_settings()
    app_settings = settings.app
    ledger_settings = settings.ledger
    report_settings = settings.reports

    audit_storage = None
    custom_store = store is not None
    if not custom_store:
        store, audit_storage = create_key_value_store(ledger_settings)
    audit_logger = audit_logger or AuditLogger(audit_storage)

    ledger = LedgerStore.load(
        store,
        key_prefix=ledger_settings.key_prefix,
        audit_logger=audit_logger,
        today=today,
    )
    goal_tracker = GoalTracker(match_by_name=ledger_settings.goal_match_by_name)
    recommendation_engine = RecommendationEngine(
        settings=settings.recommendations,
        currency_symbol=report_settings.currency_symbol,
    )

    pipeline = ReceiptIngestionPipeline(
        ledger,
        extractor or create_extractor(app_settings),
        audit_logger=audit_logger,
        max_upload_bytes=app_settings.max_upload_size_bytes,
    )

    logger.info(
        "app_components_created",
        storage_backend="custom" if custom_store else ledger_settings.storage_backend,
        extraction_backend=app_settings.extraction_backend,
    )

    return AppComponents(
        ledger=ledger,
        pipeline=pipeline,
        dashboard=DashboardFlow(
            ledger, goal_tracker, recommendation_engine, app_settings=app_settings, today=today
        ),
        exports=ExportFlow(
            ledger,
            goal_tracker,
            recommendation_engine,
            audit_logger=audit_logger,
            report_settings=report_settings,
            today=today,
        ),
        audit_logger=audit_logger,
    )
