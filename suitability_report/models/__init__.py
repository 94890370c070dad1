from .dashboard_pack import DashboardPack
from .report import ClassifiedReport, RawRow, ReportType

__all__ = ["ClassifiedReport", "DashboardPack", "RawRow", "ReportType"]
