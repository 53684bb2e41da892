import logging

import inject

from src.taskrouter.application.registry import TaskRegistry
from src.taskrouter.domain.events.task_event import TaskEvent

logger = logging.getLogger(__name__)


class TaskEventHandler:
    """Feeds push events into the task they are addressed to."""

    def __init__(self, registry: TaskRegistry | None = None) -> None:
        self._registry = registry if registry is not None else inject.instance(TaskRegistry)

    async def handle_task_event(self, event: TaskEvent) -> None:
        task = self._registry.get(event.task_sid)
        if task is None:
            logger.warning(
                "No task registered for event",
                extra={"task_sid": event.task_sid, "event_type": event.type},
            )
            return

        payload = event.payload
        if not event.is_transfer_event and payload.get("sid") == task.sid:
            # Task-level events carry the full task resource.
            task_data = {key: value for key, value in payload.items() if key != "transfers"}
            task.reconcile(task_data, payload.get("transfers") or {})
        task.dispatch(event.type, payload)
