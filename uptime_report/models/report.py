"""
Report history model
"""

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func
from uptime_report.database.connection import Base


class UptimeReportRecord(Base):
    """One delivered uptime report"""

    __tablename__ = "uptime_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    window_start = Column(DateTime(timezone=True), nullable=False, index=True)
    window_end = Column(DateTime(timezone=True), nullable=False)
    total_count = Column(Integer, nullable=False)
    on_count = Column(Integer, nullable=False)
    off_count = Column(Integer, nullable=False)
    total_uptime_hours = Column(Float, nullable=False)
    recipient = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<UptimeReportRecord(window_start={self.window_start}, on={self.on_count}, off={self.off_count})>"
