"""
Elasticsearch status store client
Fetches per-entity status records with one multi-search request
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
import structlog
from pydantic import ValidationError

from uptime_report.core.errors import QueryError
from uptime_report.schemas.status import SortOrder, StatusIndex, StatusRecord

logger = structlog.get_logger(__name__)

WINDOW_QUERY_LIMIT = 10000
BOUNDARY_PROBE_LIMIT = 1


def format_timestamp(value: datetime) -> str:
    """RFC 3339 with millisecond precision; naive datetimes are taken as UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def build_msearch_body(
    index: str,
    entity_ids: Sequence[str],
    window_start: datetime,
    window_end: datetime,
    limit: int,
    order: SortOrder,
) -> str:
    """Build an NDJSON _msearch body with one sub-query per entity"""
    lines: List[str] = []
    for entity_id in entity_ids:
        lines.append(json.dumps({"index": index}))
        query = {
            "query": {
                "bool": {
                    "must": [
                        {"term": {"container_id.keyword": entity_id}},
                        {
                            "range": {
                                "last_updated": {
                                    "gte": format_timestamp(window_start),
                                    "lt": format_timestamp(window_end),
                                }
                            }
                        },
                    ]
                }
            },
            "size": limit,
            "sort": [{"counter": {"order": SortOrder(order).value}}],
        }
        lines.append(json.dumps(query))
    return "\n".join(lines) + "\n"


class StatusStoreClient:
    """Queries the status index in Elasticsearch"""

    def __init__(
        self,
        base_url: str,
        index: str = "sms_container",
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.index = index
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the underlying HTTP session if this client created it"""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def fetch(
        self,
        entity_ids: Sequence[str],
        window_start: datetime,
        window_end: datetime,
        limit: int,
        order: SortOrder = SortOrder.ASC,
    ) -> StatusIndex:
        """
        Fetch status records observed in [window_start, window_end).

        Every requested entity gets a key in the result, with an empty list
        when the store has no record for it. `limit` applies per entity.

        Raises:
            QueryError: on transport failure or a malformed response
        """
        ids = list(entity_ids)
        if not ids:
            return {}

        body = build_msearch_body(self.index, ids, window_start, window_end, limit, order)
        session = await self._get_session()

        try:
            async with session.post(
                f"{self.base_url}/_msearch",
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/x-ndjson"},
            ) as response:
                if response.status >= 400:
                    detail = await response.text()
                    logger.error("failed to msearch elasticsearch status",
                                 status=response.status, detail=detail[:200])
                    raise QueryError(f"elasticsearch returned HTTP {response.status}")
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("failed to msearch elasticsearch status", error=str(e))
            raise QueryError(f"elasticsearch request failed: {e}") from e
        except ValueError as e:
            logger.error("failed to decode response body", error=str(e))
            raise QueryError(f"malformed elasticsearch response: {e}") from e

        results = self._parse_responses(payload, ids)
        logger.info("elasticsearch status retrieved successfully",
                    entities_count=len(results), limit=limit)
        return results

    @staticmethod
    def _parse_responses(payload: Any, entity_ids: List[str]) -> StatusIndex:
        if not isinstance(payload, dict) or not isinstance(payload.get("responses"), list):
            raise QueryError("malformed elasticsearch response: missing responses")

        responses = payload["responses"]
        if len(responses) != len(entity_ids):
            raise QueryError(
                f"malformed elasticsearch response: expected {len(entity_ids)} responses, got {len(responses)}"
            )

        results: Dict[str, List[StatusRecord]] = {entity_id: [] for entity_id in entity_ids}
        for entity_id, response in zip(entity_ids, responses):
            if not isinstance(response, dict):
                raise QueryError("malformed elasticsearch response: sub-response is not an object")
            if "error" in response:
                raise QueryError(f"elasticsearch query failed for {entity_id}: {response['error']}")
            try:
                hits = response["hits"]["hits"]
                results[entity_id].extend(StatusRecord.model_validate(hit["_source"]) for hit in hits)
            except (KeyError, TypeError, ValidationError) as e:
                logger.error("failed to decode response body", entity_id=entity_id, error=str(e))
                raise QueryError(f"malformed status record for {entity_id}: {e}") from e
        return results
