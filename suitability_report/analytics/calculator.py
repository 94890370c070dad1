"""Report Aggregator - KPIs and chart series from classified row-sets."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

import polars as pl

from ..exceptions import ReportContractError
from ..ingestion import (
    ReportType,
    clean_number,
    clean_number_expr,
    clean_percent_expr,
    device_label_expr,
    find_column,
    first_present_expr,
    frame_from_rows,
    normalized_category_expr,
    resolve_column,
    sortable_date_expr,
)
from ..models.dashboard_pack import DashboardPack
from ..models.report import RawRow
from ..settings import ReportSettings, load_settings
from .expressions import (
    label_equals_expr,
    ratio_pct_expr,
    sum_or_null_expr,
    weighted_average_expr,
    weighted_average_or_null_expr,
)
from .models import (
    BrandRiskEntry,
    CategoryPerformance,
    DailyTrendPoint,
    DeviceTrendPoint,
    IVTRate,
    KPISet,
    LoadedReports,
)
from .stats import detect_trend

logger = logging.getLogger(__name__)

BENCHMARK_LABEL = "Benchmark"
OVERALL_LABEL = "Overall"
UNSUITABLE_LABEL = "unsuitable"
ISO_DATE = r"^\d{4}-\d{2}-\d{2}$"


@dataclass
class ReportAggregator:
    """Aggregates classified row-sets into KPIs and chart series.

    Every method is a pure function of the inputs: no I/O, no mutation of
    the rows, and no exception for bad data. Missing report types or
    columns yield 0 or empty results.

    Attributes:
        reports: Row-sets keyed by report type; any subset may be absent
        cpm: Cost per 1000 impressions. None uses the configured default;
            non-numeric or negative values count as 0
        settings: Column registry and tunables

    Raises:
        ReportContractError: If a row-set is not a sequence of mappings or a
            key is not a report type.
    """

    reports: Mapping[ReportType | str, Sequence[RawRow]]
    cpm: Any = None
    settings: ReportSettings = field(default_factory=load_settings)

    def __post_init__(self) -> None:
        self._frames: dict[ReportType, pl.DataFrame] = {}
        self._row_counts: dict[ReportType, int] = {}

        if not isinstance(self.reports, Mapping):
            raise ReportContractError(
                f"reports must be a mapping of report type to rows, "
                f"got {type(self.reports).__name__}",
                self.reports,
            )

        for key, rows in self.reports.items():
            report_type = self._report_type(key)
            if rows is None or isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
                raise ReportContractError(
                    f"Row-set for {report_type.value} must be a sequence of rows, "
                    f"got {type(rows).__name__}",
                    rows,
                )
            for row in rows:
                if not isinstance(row, Mapping):
                    raise ReportContractError(
                        f"Rows for {report_type.value} must be mappings, "
                        f"got {type(row).__name__}",
                        row,
                    )

            self._row_counts[report_type] = len(rows)
            if report_type is not ReportType.UNKNOWN:
                self._frames[report_type] = frame_from_rows(rows)

        self.cpm_value = self._resolve_cpm(self.cpm)

    @staticmethod
    def _report_type(key: ReportType | str) -> ReportType:
        if isinstance(key, ReportType):
            return key
        try:
            return ReportType(key)
        except ValueError as e:
            raise ReportContractError(f"Unknown report type key: {key!r}", key) from e

    def _resolve_cpm(self, cpm: Any) -> float:
        if cpm is None:
            return float(self.settings.cpm_default)
        value = clean_number(cpm)
        if value < 0:
            logger.warning("Negative CPM %r treated as 0", cpm)
            return 0.0
        return value

    # =========================================================================
    # COLUMN LOOKUP
    # =========================================================================

    def _frame(self, report_type: ReportType) -> pl.DataFrame:
        return self._frames.get(report_type, pl.DataFrame())

    def _column(self, df: pl.DataFrame, name: str) -> str | None:
        return resolve_column(df.columns, getattr(self.settings.columns, name))

    def _first_present(self, df: pl.DataFrame, name: str) -> pl.Expr | None:
        return first_present_expr(df.columns, getattr(self.settings.columns, name).exact)

    # =========================================================================
    # KPIs
    # =========================================================================

    def _suitability_sums(self) -> tuple[float, float]:
        """(sum(suitable), sum(total)) over every Suitability row.

        Both are 0 when the report or its impression columns are absent.
        """
        df = self._frame(ReportType.SUITABILITY)
        if df.is_empty():
            return 0.0, 0.0

        total = self._first_present(df, "total_impressions")
        suitable = self._first_present(df, "suitable_impressions")
        if total is None or suitable is None:
            logger.warning(
                "Suitability report lacks impression columns; suitability rate is 0"
            )
            return 0.0, 0.0

        sums = df.select(
            clean_number_expr(total).sum().alias("total"),
            clean_number_expr(suitable).sum().alias("suitable"),
        ).row(0, named=True)
        return float(sums["suitable"]), float(sums["total"])

    def get_final_suitability(self) -> float:
        """Impression-weighted brand suitability rate (0-100, 2 decimals).

        100 * sum(suitable) / sum(total) over every Suitability row; 0 when
        the report is absent or total impressions sum to 0.
        """
        suitable, total = self._suitability_sums()
        if total <= 0:
            return 0.0
        return round(suitable / total * 100, 2)

    def get_lift(self) -> float:
        """Suitability lift in percentage points over the fixed baseline.

        final_suitability - lift_baseline, signed. A measured 0% rate gives
        -lift_baseline; only missing data (no total impressions) gives 0.
        """
        _, total = self._suitability_sums()
        if total <= 0:
            return 0.0
        return round(self.get_final_suitability() - self.settings.lift_baseline, 2)

    def get_total_exclusions(self) -> float:
        """Impressions on videos whose suitability is exactly "unsuitable"."""
        df = self._frame(ReportType.EXCLUSION)
        if df.is_empty():
            return 0.0

        status = self._column(df, "video_suitability")
        impressions = self._first_present(df, "exclusion_impressions")
        if status is None or impressions is None:
            logger.warning("Exclusion report lacks suitability/impression columns")
            return 0.0

        total = (
            df.filter(label_equals_expr(status, UNSUITABLE_LABEL))
            .select(clean_number_expr(impressions).sum())
            .item()
        )
        return float(total or 0.0)

    def get_budget_optimization(self) -> float:
        """Estimated spend avoided: (total_exclusions / 1000) * cpm."""
        return round(self.get_total_exclusions() / 1000 * self.cpm_value, 2)

    def get_kpis(self) -> KPISet:
        return KPISet(
            final_suitability=self.get_final_suitability(),
            lift=self.get_lift(),
            total_exclusions=self.get_total_exclusions(),
            budget_optimization=self.get_budget_optimization(),
        )

    # =========================================================================
    # PERFORMANCE BY CATEGORY
    # =========================================================================

    def get_performance_series(self) -> list[CategoryPerformance]:
        """Top categories by volume with volume-weighted VCR, CTR, viewability.

        Category names go through the synonym table first. Rows without
        volume are ignored. Sorted by volume descending (ties by name) and
        truncated to performance_top_n.
        """
        df = self._frame(ReportType.PERFORMANCE)
        if df.is_empty():
            return []

        volume = self._column(df, "performance_impressions")
        if volume is None:
            logger.warning("Performance report has no impressions column")
            return []

        category = self._column(df, "category")
        vcr = self._column(df, "vcr")
        ctr = self._column(df, "ctr")
        viewability = self._column(df, "performance_viewability")
        logger.debug(
            "Performance columns: category=%s vcr=%s ctr=%s viewability=%s volume=%s",
            category,
            vcr,
            ctr,
            viewability,
            volume,
        )

        def metric(column: str | None) -> pl.Expr:
            return clean_percent_expr(pl.col(column)) if column else pl.lit(0.0)

        rows = df.select(
            normalized_category_expr(
                pl.col(category) if category else pl.lit(""),
                self.settings.category_synonyms,
            ).alias("category"),
            clean_number_expr(pl.col(volume)).alias("volume"),
            metric(vcr).alias("vcr"),
            metric(ctr).alias("ctr"),
            metric(viewability).alias("viewability"),
        ).filter(pl.col("volume") > 0)

        grouped = (
            rows.group_by("category")
            .agg(
                pl.col("volume").sum(),
                weighted_average_expr("vcr", "volume").alias("vcr"),
                weighted_average_expr("ctr", "volume").alias("ctr"),
                weighted_average_expr("viewability", "volume").alias("viewability"),
            )
            .sort(["volume", "category"], descending=[True, False])
            .head(self.settings.performance_top_n)
        )

        return [
            CategoryPerformance(
                category=row["category"],
                vcr=row["vcr"],
                ctr=row["ctr"],
                viewability=row["viewability"],
                volume=row["volume"],
            )
            for row in grouped.to_dicts()
        ]

    # =========================================================================
    # DAILY TREND
    # =========================================================================

    def _daily_suitability(self) -> pl.DataFrame:
        empty = pl.DataFrame(
            schema={
                "date": pl.Utf8,
                "suitability_impressions": pl.Float64,
                "suitability_pct": pl.Float64,
            }
        )
        df = self._frame(ReportType.SUITABILITY)
        date = self._column(df, "report_date") if not df.is_empty() else None
        if date is None:
            return empty

        impressions = self._first_present(df, "total_impressions")
        suitable = self._first_present(df, "suitable_impressions")
        rate = self._column(df, "suitability_rate")

        if rate is not None:
            pct_source = clean_percent_expr(pl.col(rate))
        elif suitable is not None and impressions is not None:
            pct_source = (
                pl.when(clean_number_expr(impressions) > 0)
                .then(clean_number_expr(suitable) / clean_number_expr(impressions) * 100)
                .otherwise(pl.lit(0.0))
            )
        else:
            pct_source = pl.lit(0.0)

        return (
            df.select(
                sortable_date_expr(pl.col(date)).alias("date"),
                (
                    clean_number_expr(impressions)
                    if impressions is not None
                    else pl.lit(None, dtype=pl.Float64)
                ).alias("impressions"),
                pct_source.alias("suitability"),
            )
            .filter(pl.col("date") != "")
            .group_by("date")
            .agg(
                sum_or_null_expr("impressions").alias("suitability_impressions"),
                weighted_average_expr("suitability", "impressions").alias("suitability_pct"),
            )
            .cast({"suitability_impressions": pl.Float64, "suitability_pct": pl.Float64})
        )

    def _daily_viewability(self) -> pl.DataFrame:
        empty = pl.DataFrame(
            schema={
                "date": pl.Utf8,
                "viewability_impressions": pl.Float64,
                "viewability_pct": pl.Float64,
            }
        )
        df = self._frame(ReportType.VIEWABILITY)
        date = self._column(df, "report_date") if not df.is_empty() else None
        rate = self._column(df, "viewability_rate") if not df.is_empty() else None
        if date is None or rate is None:
            return empty

        impressions = self._first_present(df, "gross_impressions")
        return (
            df.select(
                sortable_date_expr(pl.col(date)).alias("date"),
                (
                    clean_number_expr(impressions)
                    if impressions is not None
                    else pl.lit(None, dtype=pl.Float64)
                ).alias("impressions"),
                clean_percent_expr(pl.col(rate)).alias("viewability"),
            )
            .filter(pl.col("date") != "")
            .group_by("date")
            .agg(
                sum_or_null_expr("impressions").alias("viewability_impressions"),
                weighted_average_expr("viewability", "impressions").alias("viewability_pct"),
            )
            .cast({"viewability_impressions": pl.Float64, "viewability_pct": pl.Float64})
        )

    def get_daily_trend(self, windowed: bool = True) -> list[DailyTrendPoint]:
        """Per-date volume, viewability % and suitability %, oldest first.

        Rates are impression-weighted per date. Impressions come from the
        Suitability report, falling back to Viewability gross impressions on
        dates the Suitability report does not cover.

        Args:
            windowed: Keep only the most recent trend_window dates.
        """
        daily = (
            self._daily_suitability()
            .join(self._daily_viewability(), on="date", how="full", coalesce=True)
            .select(
                pl.col("date"),
                pl.coalesce(
                    pl.col("suitability_impressions"),
                    pl.col("viewability_impressions"),
                    pl.lit(0.0),
                ).alias("impressions"),
                pl.col("viewability_pct").fill_null(0.0),
                pl.col("suitability_pct").fill_null(0.0),
            )
            .sort("date")
        )

        window = self.settings.trend_window
        if windowed and window:
            daily = daily.tail(window)

        return [
            DailyTrendPoint(
                date=row["date"],
                impressions=row["impressions"],
                viewability_pct=row["viewability_pct"],
                suitability_pct=row["suitability_pct"],
            )
            for row in daily.to_dicts()
        ]

    # =========================================================================
    # DEVICE TREND
    # =========================================================================

    def _device_expr(self, df: pl.DataFrame) -> pl.Expr:
        device = self._column(df, "device_type")
        if device is None:
            return pl.lit(None, dtype=pl.Utf8)
        return device_label_expr(pl.col(device), self.settings.device_aliases)

    def _device_names(self, observed: set[str]) -> list[str]:
        ordered = [d for d in self.settings.device_order if d in observed]
        return ordered + sorted(observed - set(ordered))

    def get_device_trend(self) -> list[DeviceTrendPoint]:
        """Daily viewability per recognized device plus an "Overall" series.

        Overall is the impression-weighted viewability of every row for the
        date, device or not. Every dated row is kept, so a date or a
        (date, device) pair whose impressions sum to 0 is None rather than
        dropped.
        """
        df = self._frame(ReportType.VIEWABILITY)
        if df.is_empty():
            return []

        date = self._column(df, "report_date")
        rate = self._column(df, "viewability_rate")
        impressions = self._first_present(df, "gross_impressions")
        if date is None or rate is None or impressions is None:
            logger.warning("Viewability report lacks date/rate/impression columns")
            return []

        base = df.select(
            sortable_date_expr(pl.col(date)).alias("date"),
            clean_number_expr(impressions).alias("impressions"),
            clean_percent_expr(pl.col(rate)).alias("viewability"),
            self._device_expr(df).alias("device"),
        ).filter(pl.col("date") != "")

        overall = {
            row["date"]: row["viewability"]
            for row in base.group_by("date")
            .agg(weighted_average_or_null_expr("viewability", "impressions").alias("viewability"))
            .to_dicts()
        }
        by_device = {
            (row["date"], row["device"]): row["viewability"]
            for row in base.drop_nulls("device")
            .group_by(["date", "device"])
            .agg(weighted_average_or_null_expr("viewability", "impressions").alias("viewability"))
            .to_dicts()
        }
        devices = self._device_names({device for _, device in by_device})

        points: list[DeviceTrendPoint] = []
        for day in sorted(overall):
            values: dict[str, float | None] = {OVERALL_LABEL: overall[day]}
            for device in devices:
                values[device] = by_device.get((day, device))
            points.append(DeviceTrendPoint(date=day, values=values))

        logger.debug("Device trend: %d dates, devices=%s", len(points), devices)
        return points

    # =========================================================================
    # BRAND RISK
    # =========================================================================

    def get_brand_risk_by_category(self) -> list[BrandRiskEntry]:
        """Suitable / unsuitable split for each GARM category.

        Reads "{Category} - Suitable Impressions" and "{Category} - Unsuitable
        Impressions" columns (any case). Each category's percentages are of
        its own suitable + unsuitable sum, so they add up to 100 when there is
        data and are both 0 otherwise. Sorted by unsuitable % descending.
        """
        df = self._frame(ReportType.SUITABILITY)
        categories = self.settings.garm_categories

        exprs: list[pl.Expr] = []
        for i, category in enumerate(categories):
            suitable = find_column(df.columns, [f"{category} - Suitable Impressions"])
            unsuitable = find_column(df.columns, [f"{category} - Unsuitable Impressions"])
            if suitable is not None:
                exprs.append(clean_number_expr(pl.col(suitable)).sum().alias(f"suitable_{i}"))
            if unsuitable is not None:
                exprs.append(
                    clean_number_expr(pl.col(unsuitable)).sum().alias(f"unsuitable_{i}")
                )

        sums: dict[str, float] = {}
        if exprs and not df.is_empty():
            sums = df.select(exprs).row(0, named=True)

        entries: list[BrandRiskEntry] = []
        for i, category in enumerate(categories):
            suitable = sums.get(f"suitable_{i}", 0.0)
            unsuitable = sums.get(f"unsuitable_{i}", 0.0)
            denominator = suitable + unsuitable
            entries.append(
                BrandRiskEntry(
                    category=category,
                    suitable_pct=suitable / denominator * 100 if denominator > 0 else 0.0,
                    unsuitable_pct=unsuitable / denominator * 100 if denominator > 0 else 0.0,
                    suitable_impressions=suitable,
                    unsuitable_impressions=unsuitable,
                )
            )

        return sorted(entries, key=lambda e: (-e.unsuitable_pct, e.category))

    # =========================================================================
    # IVT
    # =========================================================================

    def get_ivt_rates(self) -> list[IVTRate]:
        """IVT rate for the benchmark, Overall and each recognized device.

        Rates are 100 * sum(IVT impressions) / sum(gross impressions). The
        configured benchmark always comes first; groups without gross
        impressions report 0.
        """
        rates = [IVTRate(BENCHMARK_LABEL, self.settings.ivt_benchmark)]
        names = [OVERALL_LABEL, *self.settings.device_order]

        df = self._frame(ReportType.VIEWABILITY)
        ivt = self._column(df, "ivt_impressions") if not df.is_empty() else None
        gross = self._first_present(df, "gross_impressions") if not df.is_empty() else None
        if ivt is None or gross is None:
            return rates + [IVTRate(name, 0.0) for name in names]

        base = df.select(
            clean_number_expr(pl.col(ivt)).alias("ivt"),
            clean_number_expr(gross).alias("gross"),
            self._device_expr(df).alias("device"),
        )
        overall = base.select(ratio_pct_expr("ivt", "gross")).item()
        per_device = {
            row["device"]: row["rate"]
            for row in base.drop_nulls("device")
            .group_by("device")
            .agg(ratio_pct_expr("ivt", "gross").alias("rate"))
            .to_dicts()
        }

        rates.append(IVTRate(OVERALL_LABEL, float(overall)))
        rates.extend(
            IVTRate(device, float(per_device.get(device, 0.0)))
            for device in self.settings.device_order
        )
        return rates

    # =========================================================================
    # REPORT METADATA
    # =========================================================================

    def get_account_name(self) -> str:
        """Account from the first Performance (else Suitability) row."""
        for report_type in (ReportType.PERFORMANCE, ReportType.SUITABILITY):
            df = self._frame(report_type)
            if df.is_empty():
                continue
            column = find_column(df.columns, self.settings.columns.account.exact)
            if column is not None:
                value = (df[column][0] or "").strip()
                if value:
                    return value
        return self.settings.default_account_name

    def get_reporting_period(self) -> str:
        """Span of report dates as YYYY/M/D ~ YYYY/M/D, or "" if unknown."""
        for report_type in (ReportType.SUITABILITY, ReportType.VIEWABILITY):
            df = self._frame(report_type)
            if df.is_empty():
                continue
            column = self._column(df, "report_date")
            if column is None:
                continue
            dates = (
                df.select(sortable_date_expr(pl.col(column)).alias("date"))
                .filter(pl.col("date").str.contains(ISO_DATE))
                .get_column("date")
            )
            if len(dates):
                return f"{_display_date(dates.min())} ~ {_display_date(dates.max())}"
        return ""

    def get_loaded_reports(self) -> LoadedReports:
        counts = self._row_counts
        return LoadedReports(
            performance=counts.get(ReportType.PERFORMANCE, 0),
            suitability=counts.get(ReportType.SUITABILITY, 0),
            viewability=counts.get(ReportType.VIEWABILITY, 0),
            exclusion=counts.get(ReportType.EXCLUSION, 0),
            unknown=counts.get(ReportType.UNKNOWN, 0),
        )

    # =========================================================================
    # DASHBOARD PACK (CONSOLIDATED OUTPUT)
    # =========================================================================

    def get_dashboard_pack(self, insights: Sequence[str] = ()) -> DashboardPack:
        """Run every aggregation and bundle the results.

        Args:
            insights: Insight sentences to carry with the pack.
        """
        daily = self.get_daily_trend()
        full_daily = self.get_daily_trend(windowed=False)

        return DashboardPack(
            generated_at=datetime.now(),
            account_name=self.get_account_name(),
            reporting_period=self.get_reporting_period(),
            cpm=self.cpm_value,
            kpis=self.get_kpis(),
            performance=self.get_performance_series(),
            daily_trend=daily,
            device_trend=self.get_device_trend(),
            brand_risk=self.get_brand_risk_by_category(),
            ivt_rates=self.get_ivt_rates(),
            loaded_reports=self.get_loaded_reports(),
            suitability_trend=detect_trend([p.suitability_pct for p in full_daily]),
            volume_trend=detect_trend([p.impressions for p in full_daily]),
            insights=list(insights),
        )


def _display_date(ymd: str) -> str:
    """2026-01-05 -> 2026/1/5"""
    year, month, day = ymd.split("-")
    return f"{year}/{int(month)}/{int(day)}"
