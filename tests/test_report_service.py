import unittest
import sys
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, call

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from uptime_report.core.errors import DeliveryError, QueryError, RegistryError
from uptime_report.schemas.status import EntityState, SortOrder, StatusRecord
from uptime_report.services.report_service import ReportService


class TestReportService(unittest.IsolatedAsyncioTestCase):
    """Test cases for report compilation and delivery"""

    def setUp(self):
        """Set up test fixtures"""
        self.end = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        self.start = self.end - timedelta(hours=4)
        self.now = self.end + timedelta(minutes=5)

        self.registry = AsyncMock()
        self.registry.list_known_entity_ids.return_value = ["c1", "c2"]
        self.status_store = AsyncMock()
        self.sink = AsyncMock()
        self.service = ReportService(self.registry, self.status_store, self.sink, clock=lambda: self.now)

    async def test_compile_report_runs_window_then_boundary_query(self):
        on_record = StatusRecord(entity_id="c1", state=EntityState.ON,
                                 observed_at=self.end - timedelta(hours=1), elapsed_seconds=3600)
        boundary_on = StatusRecord(entity_id="c2", state=EntityState.ON,
                                   observed_at=self.end, elapsed_seconds=1800)
        self.status_store.fetch.side_effect = [
            {"c1": [on_record], "c2": []},
            {"c1": [], "c2": [boundary_on]},
        ]

        report = await self.service.compile_report(self.start, self.end)

        self.assertEqual(self.status_store.fetch.await_args_list, [
            call(["c1", "c2"], self.start, self.end, 10000, SortOrder.ASC),
            call(["c1", "c2"], self.end, self.now, 1, SortOrder.ASC),
        ])
        self.assertEqual(report.on_count, 2)
        self.assertEqual(report.off_count, 0)
        self.assertEqual(report.total_count, 2)
        self.assertAlmostEqual(report.total_uptime_hours, 1.5)
        self.assertEqual(report.window_start, self.start)
        self.assertEqual(report.window_end, self.end)

    async def test_empty_registry_yields_empty_report(self):
        self.registry.list_known_entity_ids.return_value = []
        self.status_store.fetch.return_value = {}

        report = await self.service.compile_report(self.start, self.end)

        self.assertEqual(report.total_count, 0)
        self.assertEqual(report.total_uptime_hours, 0)

    async def test_registry_error_propagates(self):
        self.registry.list_known_entity_ids.side_effect = RegistryError("redis unavailable")

        with self.assertRaises(RegistryError):
            await self.service.compile_report(self.start, self.end)
        self.status_store.fetch.assert_not_awaited()

    async def test_boundary_query_error_propagates(self):
        self.status_store.fetch.side_effect = [{"c1": [], "c2": []}, QueryError("timeout")]

        with self.assertRaises(QueryError):
            await self.service.compile_report(self.start, self.end)

    async def test_send_report_hands_off_to_sink(self):
        self.status_store.fetch.return_value = {"c1": [], "c2": []}
        report = await self.service.compile_report(self.start, self.end)

        await self.service.send_report(report, "ops@example.com")

        self.sink.deliver.assert_awaited_once_with(report, "ops@example.com")

    async def test_send_report_propagates_delivery_error(self):
        self.status_store.fetch.return_value = {"c1": [], "c2": []}
        report = await self.service.compile_report(self.start, self.end)
        self.sink.deliver.side_effect = DeliveryError("smtp down")

        with self.assertRaises(DeliveryError):
            await self.service.send_report(report, "ops@example.com")


if __name__ == '__main__':
    unittest.main()
