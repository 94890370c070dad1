from .report_service import ReportOutput, ReportService
from .session import UploadSession

__all__ = ["ReportOutput", "ReportService", "UploadSession"]
