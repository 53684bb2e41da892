from __future__ import annotations

from src.taskrouter.application.task import Task


class TaskRegistry:
    """Live tasks of the current worker session, keyed by task sid."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def register(self, task: Task) -> None:
        self._tasks[task.sid] = task

    def unregister(self, task_sid: str) -> Task | None:
        return self._tasks.pop(task_sid, None)

    def get(self, task_sid: str) -> Task | None:
        return self._tasks.get(task_sid)

    def __contains__(self, task_sid: object) -> bool:
        return task_sid in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)
