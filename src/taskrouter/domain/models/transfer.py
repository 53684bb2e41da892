from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.taskrouter.domain.models._fields import decode_timestamp


class TransferMode(str, Enum):
    WARM = "WARM"
    COLD = "COLD"


class TransferStatus(str, Enum):
    INITIATED = "initiated"
    FAILED = "failed"
    CANCELED = "canceled"
    COMPLETED = "completed"


class TransferType(str, Enum):
    WORKER = "WORKER"
    QUEUE = "QUEUE"


class TransferDescriptor(BaseModel):
    """Validated projection of a raw transfer payload."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    sid: str = Field(min_length=1, description="Unique transfer identifier.")
    mode: TransferMode = Field(description="WARM or COLD handoff.")
    status: TransferStatus = Field(description="Current transfer status.")
    to: str = Field(description="Worker or TaskQueue sid on the other leg.")
    type: TransferType | None = None
    reservation_sid: str | None = None
    initiating_worker_sid: str | None = None
    initiating_queue_sid: str | None = None
    initiating_queue_name: str | None = None
    worker_sid: str | None = None
    queue_sid: str | None = None
    queue_name: str | None = None
    transfer_failed_reason: str | None = None
    date_created: datetime
    date_updated: datetime

    @field_validator("date_created", "date_updated", mode="before")
    @classmethod
    def _decode_dates(cls, value: Any) -> Any:
        return decode_timestamp(value)


class Transfer(BaseModel):
    """Local state of one leg of a task transfer."""

    sid: str
    mode: TransferMode
    status: TransferStatus
    to: str
    type: TransferType | None = None
    reservation_sid: str | None = None
    initiating_worker_sid: str | None = None
    initiating_queue_sid: str | None = None
    initiating_queue_name: str | None = None
    worker_sid: str | None = None
    queue_sid: str | None = None
    queue_name: str | None = None
    transfer_failed_reason: str | None = None
    date_created: datetime
    date_updated: datetime

    @classmethod
    def from_descriptor(cls, descriptor: TransferDescriptor, **extra: Any):
        return cls(
            sid=descriptor.sid,
            mode=descriptor.mode,
            status=descriptor.status,
            to=descriptor.to,
            type=descriptor.type,
            reservation_sid=descriptor.reservation_sid,
            initiating_worker_sid=descriptor.initiating_worker_sid,
            initiating_queue_sid=descriptor.initiating_queue_sid,
            initiating_queue_name=descriptor.initiating_queue_name,
            worker_sid=descriptor.worker_sid,
            queue_sid=descriptor.queue_sid,
            queue_name=descriptor.queue_name,
            transfer_failed_reason=descriptor.transfer_failed_reason,
            date_created=descriptor.date_created,
            date_updated=descriptor.date_updated,
            **extra,
        )

    def apply_status(self, descriptor: TransferDescriptor) -> None:
        """Copy the status fields of ``descriptor`` onto this transfer."""
        if descriptor.sid != self.sid:
            raise ValueError(f"Transfer sid={descriptor.sid} does not match sid={self.sid}")
        self.status = descriptor.status
        self.transfer_failed_reason = descriptor.transfer_failed_reason
        self.date_updated = descriptor.date_updated


class IncomingTransfer(Transfer):
    """Transfer that brought the task to this worker."""


class OutgoingTransfer(Transfer):
    """Transfer initiated by this worker for the task."""

    task_sid: str
