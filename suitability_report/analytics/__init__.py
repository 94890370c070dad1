"""Analytics module for suitability, viewability and performance reports."""

from .calculator import ReportAggregator
from .insights import Insight, InsightEngine, InsightThresholds, Severity
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

__all__ = [
    "BrandRiskEntry",
    "CategoryPerformance",
    "DailyTrendPoint",
    "DeviceTrendPoint",
    "IVTRate",
    "Insight",
    "InsightEngine",
    "InsightThresholds",
    "KPISet",
    "LoadedReports",
    "ReportAggregator",
    "Severity",
    "detect_trend",
]
