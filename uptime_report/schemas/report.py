"""
Report Pydantic schemas
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from uptime_report.schemas.status import AggregationResult


class UptimeReport(BaseModel):
    """Report payload handed to the sinks"""
    total_count: int = Field(..., ge=0, description="Entities classified in the window")
    on_count: int = Field(..., ge=0, description="Entities on at the window end")
    off_count: int = Field(..., ge=0, description="Entities off at the window end")
    total_uptime_hours: float = Field(..., ge=0.0, description="Summed uptime inside the window")
    window_start: datetime
    window_end: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_result(cls, result: AggregationResult, window_start: datetime, window_end: datetime) -> "UptimeReport":
        return cls(
            total_count=result.total_count,
            on_count=result.on_count,
            off_count=result.off_count,
            total_uptime_hours=result.total_uptime_hours,
            window_start=window_start,
            window_end=window_end,
        )


class APIResponse(BaseModel):
    """Envelope returned by the report endpoints"""
    success: bool
    code: str
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None
