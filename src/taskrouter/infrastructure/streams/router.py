from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from src.taskrouter.domain.events.task_event import TaskEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[TaskEvent], Awaitable[None]]


class EventRouter:
    def __init__(self) -> None:
        self._handlers: dict[str, EventHandler] = {}

    def register(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type] = handler

    def register_many(self, event_types: Iterable[str], handler: EventHandler) -> None:
        for event_type in event_types:
            self.register(event_type, handler)

    def get_handler(self, event_type: str) -> EventHandler | None:
        return self._handlers.get(event_type)

    async def dispatch(self, event: TaskEvent) -> None:
        handler = self.get_handler(event.type)
        if handler is None:
            logger.warning(
                "No handler registered for event type",
                extra={"event_type": event.type},
            )
            return
        await handler(event)
