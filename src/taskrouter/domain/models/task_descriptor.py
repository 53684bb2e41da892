from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.taskrouter.domain.models._fields import decode_json_object, decode_timestamp
from src.taskrouter.domain.models.task_status import TaskStatus

# Wire properties every task payload must carry.
TASK_PROPERTIES = (
    "addons",
    "age",
    "attributes",
    "date_created",
    "date_updated",
    "priority",
    "queue_name",
    "queue_sid",
    "reason",
    "routing_target",
    "sid",
    "assignment_status",
    "task_channel_unique_name",
    "task_channel_sid",
    "timeout",
    "workflow_name",
    "workflow_sid",
)


class TaskDescriptor(BaseModel):
    """Validated projection of a raw task payload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    sid: str = Field(min_length=1, description="Unique task identifier.")
    status: TaskStatus = Field(alias="assignment_status", description="Assignment status.")
    attributes: dict[str, Any] = Field(description="Opaque task attributes.")
    add_ons: dict[str, Any] = Field(alias="addons", description="Add-on results.")
    age: int = Field(ge=0, description="Age of the task in seconds.")
    priority: int = Field(description="Routing priority.")
    timeout: int = Field(ge=0, description="Seconds the task is allowed to live.")
    reason: str | None = Field(description="Reason for completion or cancelation.")
    routing_target: str | None = Field(description="Sid the task is routed to.")
    queue_sid: str = Field(description="Current TaskQueue sid.")
    queue_name: str | None = Field(description="Current TaskQueue friendly name.")
    workflow_sid: str = Field(description="Workflow responsible for routing.")
    workflow_name: str | None = Field(description="Workflow friendly name.")
    task_channel_sid: str | None = Field(description="Task channel sid.")
    task_channel_unique_name: str | None = Field(description="Task channel unique name.")
    date_created: datetime = Field(description="When the task was created.")
    date_updated: datetime = Field(description="When the task was last updated.")

    @field_validator("attributes", "add_ons", mode="before")
    @classmethod
    def _decode_maps(cls, value: Any) -> Any:
        return decode_json_object(value)

    @field_validator("date_created", "date_updated", mode="before")
    @classmethod
    def _decode_dates(cls, value: Any) -> Any:
        return decode_timestamp(value)
