"""Classification, normalization and KPI aggregation for ad quality exports."""

from .analytics import InsightEngine, KPISet, ReportAggregator
from .exceptions import (
    IncompleteSessionError,
    ReportContractError,
    ReportError,
    SettingsLoadError,
    StaleSessionError,
)
from .ingestion import ReportLoader, ReportType, classify, clean_number
from .models import ClassifiedReport, DashboardPack
from .services import ReportService, UploadSession
from .settings import ReportSettings, load_settings

__all__ = [
    "ClassifiedReport",
    "DashboardPack",
    "IncompleteSessionError",
    "InsightEngine",
    "KPISet",
    "ReportAggregator",
    "ReportContractError",
    "ReportError",
    "ReportLoader",
    "ReportService",
    "ReportSettings",
    "ReportType",
    "SettingsLoadError",
    "StaleSessionError",
    "UploadSession",
    "classify",
    "clean_number",
    "load_settings",
]
