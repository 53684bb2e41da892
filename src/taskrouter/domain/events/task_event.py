from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

# Task-level domain events.
CANCELED = "canceled"
COMPLETED = "completed"
WRAPUP = "wrapup"
UPDATED = "updated"

# Transfer domain events.
TRANSFER_INITIATED = "transferInitiated"
TRANSFER_ATTEMPT_FAILED = "transferAttemptFailed"
TRANSFER_CANCELED = "transferCanceled"
TRANSFER_COMPLETED = "transferCompleted"
TRANSFER_FAILED = "transferFailed"

TASK_EVENT_TYPES: dict[str, str] = {
    "task.canceled": CANCELED,
    "task.completed": COMPLETED,
    "task.wrapup": WRAPUP,
    "task.updated": UPDATED,
}

TASK_TRANSFER_EVENT_TYPES: dict[str, str] = {
    "transfer-initiated": TRANSFER_INITIATED,
    "transfer-attempt-failed": TRANSFER_ATTEMPT_FAILED,
    "transfer-canceled": TRANSFER_CANCELED,
    "transfer-completed": TRANSFER_COMPLETED,
    "transfer-failed": TRANSFER_FAILED,
}

_TRANSFER_EVENT_NAMES = frozenset(TASK_TRANSFER_EVENT_TYPES.values())


def transfer_event_name(event_type: str) -> str | None:
    """Return the domain name of a transfer event, or ``None`` for any other event."""
    if event_type in _TRANSFER_EVENT_NAMES:
        return event_type
    return TASK_TRANSFER_EVENT_TYPES.get(event_type)


def task_event_name(event_type: str) -> str:
    return TASK_EVENT_TYPES.get(event_type, event_type)


class TaskEvent(BaseModel):
    """Push notification addressed to a single task."""

    event_id: str = Field(default_factory=lambda: uuid4().hex, description="Event identifier.")
    type: str = Field(min_length=1, description="Wire event type.")
    task_sid: str = Field(min_length=1, description="Sid of the task the event belongs to.")
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC), description="Event time.")
    payload: dict[str, Any] = Field(default_factory=dict, description="Raw event data.")

    @property
    def is_transfer_event(self) -> bool:
        return transfer_event_name(self.type) is not None
