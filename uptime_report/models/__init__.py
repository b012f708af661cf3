# Models package
from .report import UptimeReportRecord

__all__ = ['UptimeReportRecord']
