from src.taskrouter.infrastructure.streams.client import StreamsClient
from src.taskrouter.infrastructure.streams.consumer import StreamsConsumer
from src.taskrouter.infrastructure.streams.router import EventRouter

__all__ = [
    "StreamsClient",
    "StreamsConsumer",
    "EventRouter",
]
