from __future__ import annotations

import asyncio
import logging
import os
import socket
from collections.abc import Iterable
from uuid import uuid4

from redis.exceptions import RedisError

from src.taskrouter.infrastructure.streams.client import StreamEntry, StreamsClient
from src.taskrouter.infrastructure.streams.router import EventRouter
from src.taskrouter.infrastructure.streams.serializers import decode_event

logger = logging.getLogger(__name__)

STREAM_TASK_EVENTS = "taskrouter:task-events"
GROUP_CLIENT = "taskrouter-client"


def consumer_name() -> str:
    return f"{socket.gethostname()}-{os.getpid()}-{uuid4().hex[:8]}"


class StreamsConsumer:
    """
    Reads task events from a Redis stream and routes them one at a time.

    Entries are handled sequentially on the event loop, so the consumer is the
    single writer for every task it feeds. Entries that cannot be decoded or
    applied are logged and acknowledged; they are never redelivered.
    """

    def __init__(
        self,
        client: StreamsClient,
        *,
        stream: str,
        group: str,
        consumer_name: str,
        router: EventRouter,
        block_ms: int = 5000,
        count: int = 10,
        retry_delay_sec: float = 1.0,
        ack_attempts: int = 3,
    ) -> None:
        self._client = client
        self._stream = stream
        self._group = group
        self._consumer_name = consumer_name
        self._router = router
        self._block_ms = block_ms
        self._count = count
        self._retry_delay_sec = retry_delay_sec
        self._ack_attempts = ack_attempts
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._task is not None:
            return
        await self._client.join_group(stream=self._stream, group=self._group)
        self._running = True
        self._task = asyncio.create_task(self._run(), name=f"streams-consumer-{self._consumer_name}")
        logger.info(
            "Started stream consumer",
            extra={"stream": self._stream, "group": self._group, "consumer": self._consumer_name},
        )

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Stream consumer exited with an error", extra={"stream": self._stream})
            self._task = None
        await self._client.close()

    async def _run(self) -> None:
        try:
            while self._running:
                try:
                    entries = await self._client.read_entries(
                        stream=self._stream,
                        group=self._group,
                        consumer=self._consumer_name,
                        count=self._count,
                        block_ms=self._block_ms,
                    )
                except RedisError:
                    logger.exception("Failed to read from stream", extra={"stream": self._stream})
                    await asyncio.sleep(self._retry_delay_sec)
                    continue
                await self.process_entries(entries)
        finally:
            self._running = False

    async def process_entries(self, entries: Iterable[StreamEntry]) -> int:
        processed = 0
        for message_id, fields in entries:
            await self._process_entry(message_id, fields)
            processed += 1
        return processed

    async def _process_entry(self, message_id: str, fields: dict) -> None:
        try:
            event = decode_event(fields)
        except ValueError:
            logger.warning(
                "Dropping malformed stream entry",
                extra={"stream": self._stream, "message_id": message_id},
                exc_info=True,
            )
        else:
            try:
                await self._router.dispatch(event)
            except Exception:
                # Handler and listener failures must not stop the stream.
                logger.exception(
                    "Failed to apply task event",
                    extra={"message_id": message_id, "task_sid": event.task_sid, "event_type": event.type},
                )
        await self._ack(message_id)

    async def _ack(self, message_id: str) -> None:
        for attempt in range(1, self._ack_attempts + 1):
            try:
                await self._client.ack(stream=self._stream, group=self._group, message_id=message_id)
                return
            except RedisError:
                logger.exception(
                    "Failed to acknowledge stream entry",
                    extra={"message_id": message_id, "attempt": attempt},
                )
                if attempt < self._ack_attempts:
                    await asyncio.sleep(self._retry_delay_sec)
        logger.error(
            "Leaving stream entry pending after failed acknowledgements",
            extra={"message_id": message_id, "stream": self._stream},
        )
