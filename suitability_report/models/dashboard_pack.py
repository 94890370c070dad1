"""DashboardPack - consolidated aggregation output for the presentation layer."""

import json
import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..analytics.models import (
        BrandRiskEntry,
        CategoryPerformance,
        DailyTrendPoint,
        DeviceTrendPoint,
        IVTRate,
        KPISet,
        LoadedReports,
        TrendDirection,
    )

DEFAULT_MAX_ROWS = 500

PERFORMANCE_PLACEHOLDER = {"category": "", "vcr": 0.0, "ctr": 0.0, "viewability": 0.0, "volume": 0.0}
DAILY_PLACEHOLDER = {"date": "", "impressions": 0.0, "viewability_pct": 0.0, "suitability_pct": 0.0}
DEVICE_PLACEHOLDER = {"date": "", "Overall": 0.0}


def _clean(value: Any) -> Any:
    """Round floats to 2 places; NaN and infinity become 0."""
    if isinstance(value, float):
        return round(value, 2) if math.isfinite(value) else 0.0
    if isinstance(value, dict):
        return {k: _clean(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean(v) for v in value]
    return value


def _cap(rows: list[dict[str, Any]], max_rows: int | None) -> list[dict[str, Any]]:
    return rows if max_rows is None else rows[:max_rows]


@dataclass
class DashboardPack:
    """KPIs and chart series from one aggregation pass.

    Every series is an ordered list so that a storage layer can slim it by
    keeping the first N rows.
    """

    # Metadata
    generated_at: datetime
    account_name: str
    reporting_period: str
    cpm: float

    # Headline KPIs
    kpis: "KPISet"

    # Chart series
    performance: list["CategoryPerformance"]
    daily_trend: list["DailyTrendPoint"]
    device_trend: list["DeviceTrendPoint"]
    brand_risk: list["BrandRiskEntry"]
    ivt_rates: list["IVTRate"]

    # Inputs seen
    loaded_reports: "LoadedReports"

    # Trend direction over the full daily series
    suitability_trend: "TrendDirection" = "stable"
    volume_trend: "TrendDirection" = "stable"

    insights: list[str] = field(default_factory=list)

    def to_dict(self, max_rows: int | None = DEFAULT_MAX_ROWS) -> dict[str, Any]:
        """Convert to a JSON-serializable dict.

        Args:
            max_rows: Keep only the first N rows of each series; None keeps
                everything.

        Empty performance, daily and device series are replaced by a single
        zero-valued point so consumers always get the same shape.
        """
        performance = [asdict(p) for p in self.performance] or [dict(PERFORMANCE_PLACEHOLDER)]
        daily = [asdict(p) for p in self.daily_trend] or [dict(DAILY_PLACEHOLDER)]
        device = [{"date": p.date, **p.values} for p in self.device_trend] or [
            dict(DEVICE_PLACEHOLDER)
        ]

        return _clean(
            {
                "meta": {
                    "generated_at": self.generated_at.isoformat(),
                    "account_name": self.account_name,
                    "reporting_period": self.reporting_period,
                    "cpm": self.cpm,
                },
                "kpis": asdict(self.kpis),
                "series": {
                    "performance": _cap(performance, max_rows),
                    "daily_trend": _cap(daily, max_rows),
                    "device_trend": _cap(device, max_rows),
                    "brand_risk": _cap([asdict(e) for e in self.brand_risk], max_rows),
                    "ivt_rates": _cap([asdict(r) for r in self.ivt_rates], max_rows),
                },
                "loaded_reports": {
                    "flags": self.loaded_reports.flags(),
                    "row_counts": asdict(self.loaded_reports),
                },
                "trends": {
                    "suitability": self.suitability_trend,
                    "volume": self.volume_trend,
                },
                "insights": list(self.insights),
            }
        )

    def to_json(self, indent: int = 2, max_rows: int | None = DEFAULT_MAX_ROWS) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(max_rows=max_rows), indent=indent, ensure_ascii=False)

    def get_executive_summary(self) -> dict[str, Any]:
        """Get condensed summary for report headers."""
        top_risk = next((e for e in self.brand_risk if e.unsuitable_pct > 0), None)
        return _clean(
            {
                "account_name": self.account_name,
                "reporting_period": self.reporting_period,
                "final_suitability": self.kpis.final_suitability,
                "lift": self.kpis.lift,
                "total_exclusions": self.kpis.total_exclusions,
                "budget_optimization": self.kpis.budget_optimization,
                "top_category": self.performance[0].category if self.performance else None,
                "top_risk_category": top_risk.category if top_risk else None,
                "suitability_trend": self.suitability_trend,
                "volume_trend": self.volume_trend,
                "loaded": self.loaded_reports.flags(),
                "insight_count": len(self.insights),
            }
        )
