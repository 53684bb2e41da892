from enum import Enum


class TaskStatus(str, Enum):
    RESERVED = "reserved"
    ASSIGNED = "assigned"
    WRAPPING = "wrapping"
    COMPLETED = "completed"
    CANCELED = "canceled"
    TRANSFERRING = "transferring"
