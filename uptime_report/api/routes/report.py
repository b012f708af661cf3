"""
On-demand report endpoints
"""

import re
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from uptime_report.core.errors import UptimeReportError
from uptime_report.schemas.report import APIResponse
from uptime_report.schemas.status import ReportWindow
from uptime_report.services.report_service import ReportService

logger = structlog.get_logger(__name__)
router = APIRouter()

DATE_FORMAT = "%Y-%m-%d"
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def get_report_service(request: Request) -> ReportService:
    """Report service built at application startup"""
    return request.app.state.report_service


def _bad_request(error: str) -> JSONResponse:
    body = APIResponse(success=False, code="BAD_REQUEST", message="Invalid request parameters", error=error)
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


def _parse_date(value: str, name: str) -> datetime:
    try:
        return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        raise ValueError(f"{name} must be a date formatted as YYYY-MM-DD")


@router.get("/report/mail")
async def send_report_email(
    start_time: Optional[str] = Query(None, description="Window start, YYYY-MM-DD (UTC)"),
    end_time: Optional[str] = Query(None, description="Window end, YYYY-MM-DD (UTC); defaults to now"),
    email: Optional[str] = Query(None, description="Recipient address"),
    report_service: ReportService = Depends(get_report_service),
):
    """Compile the uptime report for a custom window and email it"""
    if not start_time:
        return _bad_request("start_time is required")
    if not email or not EMAIL_PATTERN.match(email):
        return _bad_request("a valid email is required")

    try:
        start = _parse_date(start_time, "start_time")
        end = _parse_date(end_time, "end_time") if end_time else report_service.clock()
    except ValueError as e:
        return _bad_request(str(e))

    try:
        window = ReportWindow(start=start, end=end)
    except ValidationError:
        return _bad_request("start_time must be before end_time")

    try:
        report = await report_service.compile_report(window.start, window.end)
        await report_service.send_report(report, email)
    except UptimeReportError as e:
        logger.error("failed to email report", email_to=email, error=str(e))
        body = APIResponse(success=False, code="INTERNAL_SERVER_ERROR",
                           message="Failed to send report", error=str(e))
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))

    logger.info("report emailed successfully", email_to=email)
    return APIResponse(
        success=True,
        code="REPORT_EMAILED",
        message="Report emailed successfully",
        data=report.model_dump(mode="json"),
    )
