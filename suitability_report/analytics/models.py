"""Output models for aggregation results.

All percentages are on the 0-100 scale.
"""

from dataclasses import dataclass, field
from typing import Literal

TrendDirection = Literal["increasing", "decreasing", "stable"]


@dataclass(frozen=True)
class KPISet:
    """Headline campaign KPIs, recomputed on every aggregation pass."""

    final_suitability: float  # 0-100
    lift: float  # percentage points over the baseline, signed
    total_exclusions: float  # unsuitable impressions
    budget_optimization: float  # currency amount


@dataclass(frozen=True)
class CategoryPerformance:
    """Volume-weighted metrics for one normalized content category."""

    category: str
    vcr: float
    ctr: float
    viewability: float
    volume: float


@dataclass(frozen=True)
class DailyTrendPoint:
    """Quality and volume for a single report date."""

    date: str  # YYYY-MM-DD
    impressions: float
    viewability_pct: float
    suitability_pct: float


@dataclass(frozen=True)
class DeviceTrendPoint:
    """Viewability per device for one date.

    A device maps to None when it had no impressions that day, so charts
    show a gap rather than 0%.
    """

    date: str
    values: dict[str, float | None] = field(default_factory=dict)


@dataclass(frozen=True)
class BrandRiskEntry:
    """Suitable vs unsuitable share within one GARM category."""

    category: str
    suitable_pct: float
    unsuitable_pct: float
    suitable_impressions: float
    unsuitable_impressions: float


@dataclass(frozen=True)
class IVTRate:
    """Invalid-traffic rate for the benchmark, overall, or one device."""

    name: str
    rate_pct: float


@dataclass(frozen=True)
class LoadedReports:
    """Which report types contributed rows, and how many."""

    performance: int = 0
    suitability: int = 0
    viewability: int = 0
    exclusion: int = 0
    unknown: int = 0

    def flags(self) -> dict[str, bool]:
        return {
            "performance": self.performance > 0,
            "suitability": self.suitability > 0,
            "viewability": self.viewability > 0,
            "exclusion": self.exclusion > 0,
        }
