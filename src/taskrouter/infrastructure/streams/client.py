from __future__ import annotations

import logging
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ResponseError

logger = logging.getLogger(__name__)

StreamEntry = tuple[str, dict[str, Any]]


class StreamsClient:
    """Consumer-group access to the task event stream."""

    def __init__(
        self,
        url: str,
        *,
        max_connections: int = 4,
        socket_timeout: float | None = None,
        socket_connect_timeout: float = 5.0,
    ) -> None:
        # Blocking reads hold a connection for up to BLOCK_MS, so no socket timeout by default.
        pool = ConnectionPool.from_url(
            url,
            max_connections=max_connections,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_connect_timeout,
            decode_responses=True,
        )
        self._redis = Redis(connection_pool=pool)

    async def join_group(self, *, stream: str, group: str) -> None:
        """Create ``group`` on ``stream`` from new entries on; an existing group is reused."""
        try:
            await self._redis.xgroup_create(name=stream, groupname=group, id="$", mkstream=True)
        except ResponseError as exc:
            if "BUSYGROUP" not in str(exc):
                raise
            logger.debug("Joining existing consumer group", extra={"stream": stream, "group": group})
            return
        logger.info("Created consumer group", extra={"stream": stream, "group": group})

    async def read_entries(
        self,
        *,
        stream: str,
        group: str,
        consumer: str,
        count: int,
        block_ms: int,
    ) -> list[StreamEntry]:
        """Return entries never delivered to the group, oldest first."""
        response = await self._redis.xreadgroup(
            groupname=group,
            consumername=consumer,
            streams={stream: ">"},
            count=count,
            block=block_ms,
        )
        if not response:
            return []
        # RESP3 connections answer with a mapping keyed by stream name.
        batches = response.values() if isinstance(response, dict) else (entries for _, entries in response)
        return [(message_id, fields) for entries in batches for message_id, fields in entries]

    async def ack(self, *, stream: str, group: str, message_id: str) -> None:
        await self._redis.xack(stream, group, message_id)

    async def close(self) -> None:
        await self._redis.aclose()
