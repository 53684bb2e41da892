import pytest

from src.taskrouter.application.handlers import TaskEventHandler
from src.taskrouter.application.registry import TaskRegistry
from src.taskrouter.domain.events.task_event import TaskEvent
from src.taskrouter.domain.exceptions import ReconciliationFailed
from src.taskrouter.domain.models.task_status import TaskStatus
from src.taskrouter.domain.models.transfer import TransferStatus


@pytest.fixture
def registry(task) -> TaskRegistry:
    registry = TaskRegistry()
    registry.register(task)
    return registry


@pytest.mark.asyncio
async def test_task_event_reconciles_then_emits(task, registry, recorder, task_payload) -> None:
    handler = TaskEventHandler(registry)
    listener = recorder()
    task.on("wrapup", listener)
    payload = task_payload(assignment_status="wrapping")

    await handler.handle_task_event(TaskEvent(type="task.wrapup", task_sid="WTxxx", payload=payload))

    assert task.status is TaskStatus.WRAPPING
    assert listener.calls == [(task,)]


@pytest.mark.asyncio
async def test_task_event_applies_embedded_transfers(task, registry, task_payload, transfer_payload) -> None:
    handler = TaskEventHandler(registry)
    payload = task_payload(
        assignment_status="transferring",
        transfers={"outgoing": transfer_payload(sid="TTout")},
    )

    await handler.handle_task_event(TaskEvent(type="task.updated", task_sid="WTxxx", payload=payload))

    assert task.status is TaskStatus.TRANSFERRING
    assert task.transfers.outgoing.sid == "TTout"


@pytest.mark.asyncio
async def test_transfer_event_goes_to_dispatch(task, registry, recorder, transfer_payload) -> None:
    handler = TaskEventHandler(registry)
    task.transfers.apply_outgoing(transfer_payload(), True)
    listener = recorder()
    task.on("transferCompleted", listener)

    await handler.handle_task_event(
        TaskEvent(type="transfer-completed", task_sid="WTxxx", payload=transfer_payload(status="completed"))
    )

    assert task.status is TaskStatus.ASSIGNED
    assert task.transfers.outgoing.status is TransferStatus.COMPLETED
    assert listener.calls == [(task.transfers.outgoing,)]


@pytest.mark.asyncio
async def test_event_for_unregistered_task_is_ignored(registry, recorder) -> None:
    handler = TaskEventHandler(registry)

    await handler.handle_task_event(TaskEvent(type="task.canceled", task_sid="WTunknown", payload={}))

    assert len(registry) == 1


@pytest.mark.asyncio
async def test_bad_task_payload_surfaces_reconciliation_failure(task, registry, recorder, task_payload) -> None:
    handler = TaskEventHandler(registry)
    listener = recorder()
    task.on("updated", listener)

    with pytest.raises(ReconciliationFailed):
        await handler.handle_task_event(
            TaskEvent(type="task.updated", task_sid="WTxxx", payload=task_payload(age="old"))
        )

    assert listener.calls == []


@pytest.mark.asyncio
async def test_handler_defaults_to_injected_registry(monkeypatch: pytest.MonkeyPatch, registry) -> None:
    import inject

    monkeypatch.setattr(inject, "instance", lambda interface: registry)

    handler = TaskEventHandler()

    await handler.handle_task_event(TaskEvent(type="task.canceled", task_sid="WTxxx", payload={}))
    assert registry.unregister("WTxxx") is not None
    assert "WTxxx" not in registry
