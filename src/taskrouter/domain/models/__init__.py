from src.taskrouter.domain.models.api_version import ApiVersion
from src.taskrouter.domain.models.task_descriptor import TASK_PROPERTIES, TaskDescriptor
from src.taskrouter.domain.models.task_status import TaskStatus
from src.taskrouter.domain.models.transfer import (
    IncomingTransfer,
    OutgoingTransfer,
    Transfer,
    TransferDescriptor,
    TransferMode,
    TransferStatus,
    TransferType,
)

__all__ = [
    "ApiVersion",
    "TASK_PROPERTIES",
    "TaskDescriptor",
    "TaskStatus",
    "Transfer",
    "TransferDescriptor",
    "TransferMode",
    "TransferStatus",
    "TransferType",
    "IncomingTransfer",
    "OutgoingTransfer",
]
