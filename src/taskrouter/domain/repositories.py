from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from src.taskrouter.domain.models.api_version import ApiVersion


class RequestClient(Protocol):
    """Transport contract used by entities to issue commands to the routing service."""

    async def post(
        self, path: str, params: Mapping[str, Any], api_version: ApiVersion
    ) -> dict[str, Any]:
        """Send ``params`` to ``path`` and return the decoded JSON response."""
