"""Report service - orchestrates classification, aggregation and insights."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from ..analytics import (
    Insight,
    InsightEngine,
    InsightThresholds,
    KPISet,
    ReportAggregator,
)
from ..exceptions import IncompleteSessionError, StaleSessionError
from ..ingestion import ReportLoader
from ..models.dashboard_pack import DashboardPack
from ..models.report import ClassifiedReport, RawRow, ReportType
from ..settings import load_settings
from .session import UploadSession

logger = logging.getLogger(__name__)


@dataclass
class ReportOutput:
    """Consolidated output from report generation."""

    account_name: str
    kpis: KPISet
    dashboard_pack: DashboardPack
    insights: list[Insight] = field(default_factory=list)
    dropped_files: list[str] = field(default_factory=list)


class ReportService:
    """Service for turning a batch of uploaded exports into a dashboard.

    Orchestrates:
    1. Header location and classification of each file
    2. Grouping files by report type (same-type files are concatenated)
    3. Running every aggregation
    4. Rule-based insights over the KPIs

    Usage:
        service = ReportService()
        session = service.start_session(expected_files=2)
        service.ingest_raw_rows(session, risk_grid, "risk.csv")
        service.ingest_table(session, headers, rows, "viewability.xlsx")
        output = service.finalize(session, cpm=1500)
    """

    def __init__(self, settings_path: Path | None = None):
        """Initialize service with settings.

        Args:
            settings_path: Path to a settings YAML. Defaults to bundled config.
        """
        self.settings = load_settings(settings_path)
        self.loader = ReportLoader(self.settings)
        self._active_session: UploadSession | None = None

    # =========================================================================
    # UPLOAD SESSIONS
    # =========================================================================

    def start_session(self, expected_files: int | None = None) -> UploadSession:
        """Open a new upload session, cancelling the previous one."""
        if self._active_session is not None:
            self._active_session.cancel()

        session = UploadSession(expected_files=expected_files)
        self._active_session = session
        logger.info(
            "Started upload session %s (expecting %s files)",
            session.session_id,
            expected_files if expected_files is not None else "any number of",
        )
        return session

    def ingest_raw_rows(
        self,
        session: UploadSession,
        raw_rows: Sequence[Sequence[Any]],
        source_name: str,
    ) -> ClassifiedReport:
        """Classify a raw grid and attach it to the session."""
        report = self.loader.from_raw_rows(raw_rows, source_name)
        session.add(report)
        return report

    def ingest_table(
        self,
        session: UploadSession,
        headers: Sequence[Any],
        rows: Sequence[Mapping[str, Any]],
        source_name: str,
    ) -> ClassifiedReport:
        """Classify a pre-headered table and attach it to the session."""
        report = self.loader.from_table(headers, rows, source_name)
        session.add(report)
        return report

    def finalize(self, session: UploadSession, cpm: Any = None) -> ReportOutput:
        """Aggregate a session once every expected file is in.

        Raises:
            StaleSessionError: If the session was cancelled
            IncompleteSessionError: If files are still outstanding
        """
        if session.cancelled:
            raise StaleSessionError(session.session_id)
        if not session.is_complete:
            raise IncompleteSessionError(
                session.session_id, session.expected_files or 0, session.received
            )

        logger.info(
            "Aggregating session %s with %d files", session.session_id, session.received
        )
        return self.generate_report(session.reports, cpm=cpm)

    # =========================================================================
    # REPORT GENERATION
    # =========================================================================

    @staticmethod
    def group_reports(
        reports: Sequence[ClassifiedReport],
    ) -> dict[ReportType, list[RawRow]]:
        """Concatenate the rows of same-type files, in submission order."""
        grouped: dict[ReportType, list[RawRow]] = {}
        for report in reports:
            grouped.setdefault(report.type, []).extend(report.rows)
        return grouped

    def generate_report(
        self, reports: Sequence[ClassifiedReport], cpm: Any = None
    ) -> ReportOutput:
        """Generate the dashboard from classified files.

        Args:
            reports: Classified files; Unknown files are reported as dropped
            cpm: Cost per 1000 impressions. Defaults to the configured CPM

        Returns:
            ReportOutput with KPIs, chart series and insights
        """
        dropped = [r.source_name for r in reports if not r.is_recognized]
        for name in dropped:
            logger.warning("File %s was not recognized and is left out", name)

        aggregator = ReportAggregator(
            reports=self.group_reports(reports),
            cpm=cpm,
            settings=self.settings,
        )
        kpis = aggregator.get_kpis()

        insight_engine = InsightEngine(
            kpis,
            thresholds=InsightThresholds(),
            currency_symbol=self.settings.currency_symbol,
        )
        insights = insight_engine.generate_all_insights()

        pack = aggregator.get_dashboard_pack(
            insights=[i.description for i in insights[:3]]
        )

        return ReportOutput(
            account_name=pack.account_name,
            kpis=kpis,
            dashboard_pack=pack,
            insights=insights,
            dropped_files=dropped,
        )

    def generate_summary_dict(
        self, output: ReportOutput, max_rows: int | None = None
    ) -> dict[str, Any]:
        """Convert ReportOutput to JSON-serializable dictionary.

        Args:
            output: ReportOutput from generate_report()
            max_rows: Row cap per series. Defaults to the configured cap

        Returns:
            Dictionary suitable for JSON serialization or persistence
        """
        summary = output.dashboard_pack.to_dict(
            max_rows=max_rows if max_rows is not None else self.settings.max_chart_rows
        )
        summary["insight_details"] = [
            {
                "rule_id": i.rule_id,
                "description": i.description,
                "severity": i.severity.value,
                "recommendation": i.recommendation,
                "metrics": i.metrics,
            }
            for i in output.insights
        ]
        summary["dropped_files"] = list(output.dropped_files)
        return summary
