from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from src.taskrouter.application.task import Task
from src.taskrouter.domain.models.api_version import ApiVersion
from src.taskrouter.domain.models.task_descriptor import TaskDescriptor
from src.taskrouter.domain.repositories import RequestClient
from src.taskrouter.infrastructure.routes import RouteTable

WORKSPACE_SID = "WSxxx"
WORKER_SID = "WKxxx"
TASK_SID = "WTxxx"
RESERVATION_SID = "WRxxx"


class StubRequestClient(RequestClient):
    """In-memory request collaborator recording every post."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any], ApiVersion]] = []
        self.responses: list[dict[str, Any]] = []
        self.error: Exception | None = None

    async def post(
        self, path: str, params: Mapping[str, Any], api_version: ApiVersion
    ) -> dict[str, Any]:
        self.calls.append((path, dict(params), api_version))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


def build_task_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "sid": TASK_SID,
        "assignment_status": "assigned",
        "attributes": '{"language": "en"}',
        "addons": "{}",
        "age": 25,
        "priority": 0,
        "timeout": 86400,
        "reason": None,
        "routing_target": None,
        "queue_sid": "WQxxx",
        "queue_name": "Sales",
        "workflow_sid": "WWxxx",
        "workflow_name": "Default",
        "task_channel_sid": "TCxxx",
        "task_channel_unique_name": "voice",
        "date_created": 1700000000,
        "date_updated": 1700000100,
    }
    payload.update(overrides)
    return payload


def build_transfer_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "sid": "TTxxx",
        "mode": "WARM",
        "status": "initiated",
        "to": "WKyyy",
        "type": "WORKER",
        "reservation_sid": RESERVATION_SID,
        "initiating_worker_sid": WORKER_SID,
        "date_created": 1700000200,
        "date_updated": 1700000200,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def task_payload() -> Callable[..., dict[str, Any]]:
    return build_task_payload


@pytest.fixture
def transfer_payload() -> Callable[..., dict[str, Any]]:
    return build_transfer_payload


@pytest.fixture
def routes() -> RouteTable:
    return RouteTable(WORKSPACE_SID, WORKER_SID)


@pytest.fixture
def request_client() -> StubRequestClient:
    return StubRequestClient()


@pytest.fixture
def task(request_client: StubRequestClient, routes: RouteTable) -> Task:
    descriptor = TaskDescriptor.model_validate(build_task_payload())
    return Task(RESERVATION_SID, descriptor, request=request_client, routes=routes)


class Recorder:
    """Collects listener invocations."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)


@pytest.fixture
def recorder() -> Callable[[], Recorder]:
    return Recorder
