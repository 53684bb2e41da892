from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from src.taskrouter.application.handlers import TaskEventHandler
from src.taskrouter.domain.events.task_event import TASK_EVENT_TYPES, TASK_TRANSFER_EVENT_TYPES
from src.taskrouter.infrastructure.streams.client import StreamsClient
from src.taskrouter.infrastructure.streams.consumer import (
    GROUP_CLIENT,
    STREAM_TASK_EVENTS,
    StreamsConsumer,
    consumer_name,
)
from src.taskrouter.infrastructure.streams.router import EventRouter

_stream_consumer: StreamsConsumer | None = None


class StreamSettings(BaseSettings):
    """Configuration for the Redis Streams consumer feeding task events."""
    REDIS_URL: str = "redis://redis:6379/0"
    STREAM_NAME: str = STREAM_TASK_EVENTS
    GROUP_NAME: str = GROUP_CLIENT
    CONSUMER_NAME: str | None = None
    BLOCK_MS: int = 5000
    COUNT: int = 10

    model_config = ConfigDict(env_file=".env", extra="ignore")


def build_event_router(handler: TaskEventHandler | None = None) -> EventRouter:
    """Build an event router wired to the task event handler."""
    router = EventRouter()
    handler = handler or TaskEventHandler()
    router.register_many(TASK_EVENT_TYPES, handler.handle_task_event)
    router.register_many(TASK_TRANSFER_EVENT_TYPES, handler.handle_task_event)
    return router


def build_stream_consumer(settings: StreamSettings | None = None) -> StreamsConsumer:
    """Create a streams consumer bound to the task event router."""
    if settings is None:
        settings = StreamSettings()
    client = StreamsClient(settings.REDIS_URL)
    router = build_event_router()
    # Several client processes may join the same group.
    name = settings.CONSUMER_NAME or consumer_name()
    return StreamsConsumer(
        client,
        stream=settings.STREAM_NAME,
        group=settings.GROUP_NAME,
        consumer_name=name,
        router=router,
        block_ms=settings.BLOCK_MS,
        count=settings.COUNT,
    )


def configure_stream_consumer() -> StreamsConsumer:
    """Return the singleton streams consumer used by the client process."""
    global _stream_consumer
    if _stream_consumer is None:
        _stream_consumer = build_stream_consumer()
    return _stream_consumer
