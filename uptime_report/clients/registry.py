"""
Redis-backed registry of known entity identifiers
"""

import json
from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
import structlog

from uptime_report.core.errors import RegistryError

logger = structlog.get_logger(__name__)


class EntityRegistry:
    """Reads the list of known containers cached under a fixed Redis key"""

    def __init__(self, client: redis.Redis, key: str = "containers"):
        self.client = client
        self.key = key

    @classmethod
    def from_settings(cls, host: str, port: int, db: int = 0,
                      password: Optional[str] = None, key: str = "containers") -> "EntityRegistry":
        client = redis.Redis(host=host, port=port, db=db, password=password or None)
        return cls(client, key=key)

    async def close(self):
        await self.client.aclose()

    async def list_known_entity_ids(self) -> List[str]:
        """
        Return known entity ids in registry order, without duplicates.

        A missing key means no known entities.

        Raises:
            RegistryError: on connection failure or malformed cache content
        """
        try:
            raw = await self.client.get(self.key)
        except RedisError as e:
            logger.error("failed to get container ids from redis", key=self.key, error=str(e))
            raise RegistryError(f"redis unavailable: {e}") from e

        if raw is None:
            return []

        try:
            entries = json.loads(raw)
            # an empty list serialized as JSON null
            if entries is None:
                return []
            ids = [entry["container_id"] for entry in entries]
        except (ValueError, TypeError, KeyError) as e:
            logger.error("failed to decode container ids", key=self.key, error=str(e))
            raise RegistryError(f"malformed registry entry under {self.key!r}: {e}") from e

        # dict keeps insertion order
        return list(dict.fromkeys(str(entity_id) for entity_id in ids))
