"""
Periodic report worker
Compiles and delivers one uptime report per interval until stopped
"""

import asyncio
from datetime import timedelta
from typing import Optional

import structlog

from uptime_report.core.errors import ConfigError, DeliveryError, QueryError, RegistryError
from uptime_report.schemas.status import ReportWindow
from uptime_report.services.report_service import ReportService

logger = structlog.get_logger(__name__)


class ReportWorker:
    """Runs the report cycle at a fixed rate in a background task"""

    def __init__(self, report_service: ReportService, recipient: str, interval: timedelta):
        if interval <= timedelta(0):
            raise ConfigError(f"report interval must be positive, got {interval}")
        self.report_service = report_service
        self.recipient = recipient
        self.interval = interval
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def clock(self):
        # windows and the boundary probe read the same clock
        return self.report_service.clock

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Start the loop; must be called from a running event loop"""
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="report-worker")
        logger.info("report worker started", interval_seconds=self.interval.total_seconds())

    async def stop(self):
        """Signal the loop to exit and wait until it has, including any in-flight cycle"""
        if self._task is None:
            return
        self._stop_event.set()
        try:
            await self._task
        finally:
            self._task = None

    async def _run(self):
        """Main report loop, ticking on fixed deadlines so windows meet end to end"""
        loop = asyncio.get_running_loop()
        period = self.interval.total_seconds()
        next_tick = loop.time() + period

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, next_tick - loop.time()))
            except asyncio.TimeoutError:
                try:
                    await self.run_cycle()
                except Exception:
                    logger.exception("unexpected error in report cycle")

                next_tick += period
                now = loop.time()
                if next_tick <= now:
                    # overran; skip missed deadlines instead of bursting
                    missed = int((now - next_tick) // period) + 1
                    next_tick += missed * period
                    logger.warning("report cycle overran interval", missed_ticks=missed)
        logger.info("report worker stopped")

    async def run_cycle(self):
        """Compile the report for the interval ending now and deliver it"""
        window_end = self.clock()
        window = ReportWindow(start=window_end - self.interval, end=window_end)
        log = logger.bind(window_start=window.start.isoformat(), window_end=window.end.isoformat(),
                          window_hours=window.hours)

        try:
            report = await self.report_service.compile_report(window.start, window.end)
        except RegistryError as e:
            log.error("failed to retrieve container ids", error=str(e))
            return
        except QueryError as e:
            log.error("failed to retrieve elasticsearch status", error=str(e))
            return

        try:
            await self.report_service.send_report(report, self.recipient)
        except DeliveryError as e:
            log.error("failed to deliver report", error=str(e))
            return
        log.info("report delivered successfully", total_count=report.total_count)
