from enum import Enum


class ApiVersion(str, Enum):
    V1 = "v1"  # legacy
    V2 = "v2"
