"""
Report history persistence and multi-sink delivery
"""

import asyncio
from typing import Protocol, Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from uptime_report.core.errors import DeliveryError
from uptime_report.models.report import UptimeReportRecord
from uptime_report.schemas.report import UptimeReport

logger = structlog.get_logger(__name__)


class ReportSink(Protocol):
    async def deliver(self, report: UptimeReport, recipient: str) -> None: ...


class DatabaseReportSink:
    """Stores every delivered report in the uptime_reports table"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _save(self, report: UptimeReport, recipient: str) -> int:
        db = self.session_factory()
        try:
            record = UptimeReportRecord(
                window_start=report.window_start,
                window_end=report.window_end,
                total_count=report.total_count,
                on_count=report.on_count,
                off_count=report.off_count,
                total_uptime_hours=report.total_uptime_hours,
                recipient=recipient or None,
            )
            db.add(record)
            db.commit()
            return record.id
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    async def deliver(self, report: UptimeReport, recipient: str):
        try:
            record_id = await asyncio.to_thread(self._save, report, recipient)
        except SQLAlchemyError as e:
            logger.error("failed to store report", error=str(e))
            raise DeliveryError(f"failed to store report: {e}") from e
        logger.info("report stored", report_id=record_id)


class FanoutReportSink:
    """Delivers to several sinks in order, stopping at the first failure"""

    def __init__(self, sinks: Sequence[ReportSink]):
        self.sinks = list(sinks)

    async def deliver(self, report: UptimeReport, recipient: str):
        for sink in self.sinks:
            await sink.deliver(report, recipient)
