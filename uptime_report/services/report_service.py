"""
Business logic for container uptime reports.
- Two-phase fetch: records inside the window, then one boundary record per entity.
- Aggregation is delegated to the pure aggregator.
- Errors from the registry, the store and the sinks propagate to the caller.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

import structlog

from uptime_report.clients.registry import EntityRegistry
from uptime_report.clients.status_store import (
    BOUNDARY_PROBE_LIMIT,
    WINDOW_QUERY_LIMIT,
    StatusStoreClient,
)
from uptime_report.schemas.report import UptimeReport
from uptime_report.schemas.status import SortOrder, StatusIndex
from uptime_report.services.aggregator import aggregate
from uptime_report.sinks.database_sink import ReportSink

logger = structlog.get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportService:
    """Compiles uptime reports and hands them to a sink"""

    def __init__(
        self,
        registry: EntityRegistry,
        status_store: StatusStoreClient,
        sink: ReportSink,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.registry = registry
        self.status_store = status_store
        self.sink = sink
        self.clock = clock or utc_now

    async def get_status(
        self,
        entity_ids: Sequence[str],
        limit: int,
        start: datetime,
        end: datetime,
        order: SortOrder = SortOrder.ASC,
    ) -> StatusIndex:
        """Fetch status records for entity_ids observed in [start, end)"""
        return await self.status_store.fetch(entity_ids, start, end, limit, order)

    async def compile_report(self, start: datetime, end: datetime) -> UptimeReport:
        """
        Build the report for [start, end).

        Raises:
            RegistryError: if the known entity list is unavailable
            QueryError: if either status query fails
        """
        entity_ids = await self.registry.list_known_entity_ids()
        log = logger.bind(window_start=start.isoformat(), window_end=end.isoformat(),
                          entities_count=len(entity_ids))

        window_records = await self.get_status(entity_ids, WINDOW_QUERY_LIMIT, start, end, SortOrder.ASC)
        log.debug("window records fetched")

        # upper bound is "as of now", not part of the window
        boundary_records = await self.get_status(entity_ids, BOUNDARY_PROBE_LIMIT, end, self.clock(), SortOrder.ASC)
        log.debug("boundary records fetched")

        result = aggregate(window_records, boundary_records, start, end)
        log.info("report compiled", on_count=result.on_count, off_count=result.off_count,
                 total_uptime_hours=result.total_uptime_hours)
        return UptimeReport.from_result(result, start, end)

    async def send_report(self, report: UptimeReport, recipient: str):
        """
        Deliver a compiled report.

        Raises:
            DeliveryError: if the sink rejects the report
        """
        await self.sink.deliver(report, recipient)
