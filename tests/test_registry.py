import unittest
import sys
import os
import json
import asyncio
from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from uptime_report.clients.registry import EntityRegistry
from uptime_report.core.errors import RegistryError


class TestEntityRegistry(unittest.IsolatedAsyncioTestCase):
    """Test cases for the Redis entity registry"""

    def setUp(self):
        """Set up test fixtures"""
        self.client = AsyncMock()
        self.registry = EntityRegistry(self.client, key="containers")

    async def test_missing_key_means_no_entities(self):
        self.client.get.return_value = None

        self.assertEqual(await self.registry.list_known_entity_ids(), [])
        self.client.get.assert_awaited_once_with("containers")

    async def test_null_value_means_no_entities(self):
        """An empty container list written as JSON null"""
        self.client.get.return_value = b"null"

        self.assertEqual(await self.registry.list_known_entity_ids(), [])

    async def test_ids_keep_order_without_duplicates(self):
        self.client.get.return_value = json.dumps([
            {"container_id": "c2", "status": "ON"},
            {"container_id": "c1", "status": "OFF"},
            {"container_id": "c2", "status": "OFF"},
        ])

        self.assertEqual(await self.registry.list_known_entity_ids(), ["c2", "c1"])

    async def test_malformed_json_raises_registry_error(self):
        self.client.get.return_value = b"not json"

        with self.assertRaises(RegistryError):
            await self.registry.list_known_entity_ids()

    async def test_entry_without_id_raises_registry_error(self):
        self.client.get.return_value = json.dumps([{"status": "ON"}])

        with self.assertRaises(RegistryError):
            await self.registry.list_known_entity_ids()

    async def test_connection_failure_raises_registry_error(self):
        self.client.get.side_effect = RedisConnectionError("connection refused")

        with self.assertRaises(RegistryError):
            await self.registry.list_known_entity_ids()

    async def test_close_releases_client(self):
        await self.registry.close()

        self.client.aclose.assert_awaited_once()


def test_registry_reads_fixture_payload(mock_redis_client):
    registry = EntityRegistry(mock_redis_client)

    assert asyncio.run(registry.list_known_entity_ids()) == ["container1", "container2"]
