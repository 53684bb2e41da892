from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

import httpx

from src.taskrouter.domain.exceptions import RemoteCallFailed
from src.taskrouter.domain.models.api_version import ApiVersion
from src.taskrouter.domain.repositories import RequestClient

logger = logging.getLogger(__name__)


def encode_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Form-encode command parameters; mappings travel as JSON."""
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, Enum):
            encoded[key] = str(value.value)
        elif isinstance(value, (Mapping, list)):
            encoded[key] = json.dumps(value)
        else:
            encoded[key] = str(value)
    return encoded


class HttpRequestClient(RequestClient):
    """Posts commands to the routing service over ``httpx``. No retries are attempted."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            transport=transport,
        )

    async def post(
        self, path: str, params: Mapping[str, Any], api_version: ApiVersion
    ) -> dict[str, Any]:
        url = f"/{api_version.value}/{path.lstrip('/')}"
        try:
            response = await self._http.post(url, data=encode_params(params))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning(
                "Request rejected by routing service",
                extra={"url": url, "status_code": status_code},
            )
            raise RemoteCallFailed(
                f"POST {url} failed with status {status_code}", status_code=status_code
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Request to routing service failed", extra={"url": url})
            raise RemoteCallFailed(f"POST {url} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise RemoteCallFailed(
                f"POST {url} returned a non-JSON body", status_code=response.status_code
            ) from exc
        if not isinstance(body, dict):
            raise RemoteCallFailed(
                f"POST {url} returned a non-object body", status_code=response.status_code
            )
        return body

    async def close(self) -> None:
        await self._http.aclose()
