import pytest

from src.taskrouter.application.transfers import TransferSet
from src.taskrouter.domain.exceptions import InvalidArgument
from src.taskrouter.domain.models.task_status import TaskStatus
from src.taskrouter.domain.models.transfer import OutgoingTransfer, TransferMode, TransferStatus

TRANSFER_EVENTS = ("transferInitiated", "transferAttemptFailed", "transferCanceled", "transferCompleted", "transferFailed")


def listen_all(task, recorder):
    recorders = {name: recorder() for name in (*TRANSFER_EVENTS, "canceled", "completed", "wrapup", "updated")}
    for name, listener in recorders.items():
        task.on(name, listener)
    return recorders


@pytest.mark.parametrize("event_type", ["canceled", "completed", "wrapup", "updated"])
def test_task_level_events_carry_the_task(task, recorder, event_type) -> None:
    listener = recorder()
    task.on(event_type, listener)

    task.dispatch(event_type, {})

    assert listener.calls == [(task,)]


def test_wire_task_event_names_map_to_domain_names(task, recorder) -> None:
    listener = recorder()
    task.on("completed", listener)

    task.dispatch("task.completed", {"sid": "WTxxx"})

    assert listener.calls == [(task,)]


@pytest.mark.parametrize(
    "event_type, raw_event_data",
    [("", {}), (None, {}), ("updated", None), ("updated", "payload"), ("updated", ["sid"])],
)
def test_dispatch_rejects_malformed_input(task, event_type, raw_event_data) -> None:
    with pytest.raises(InvalidArgument):
        task.dispatch(event_type, raw_event_data)


def test_transfer_initiated_replaces_matching_outgoing(task, recorder, transfer_payload) -> None:
    task.transfers.apply_outgoing(transfer_payload(), True)
    previous = task.transfers.outgoing
    recorders = listen_all(task, recorder)

    task.dispatch("transfer-initiated", transfer_payload(mode="COLD", date_updated=1700000300))

    outgoing = task.transfers.outgoing
    assert outgoing is not previous
    assert outgoing.mode is TransferMode.COLD
    assert recorders["transferInitiated"].calls == [(outgoing,)]
    assert all(not r.calls for name, r in recorders.items() if name != "transferInitiated")


def test_transfer_event_for_unknown_sid_is_dropped(task, recorder, transfer_payload) -> None:
    task.transfers.apply_outgoing(transfer_payload(), True)
    before = task.transfers.outgoing.model_dump()
    recorders = listen_all(task, recorder)

    for event_type in ("transfer-initiated", "transfer-completed", "transfer-failed", "transfer-canceled"):
        task.dispatch(event_type, transfer_payload(sid="TTstale", status="completed"))

    assert task.transfers.outgoing.model_dump() == before
    assert all(not r.calls for r in recorders.values())


def test_transfer_event_without_held_transfer_creates_nothing(task, recorder, transfer_payload) -> None:
    recorders = listen_all(task, recorder)

    task.dispatch("transfer-initiated", transfer_payload())
    task.dispatch("transfer-completed", transfer_payload(status="completed"))

    assert task.transfers.outgoing is None
    assert task.transfers.incoming is None
    assert all(not r.calls for r in recorders.values())


@pytest.mark.parametrize(
    "event_type, status, expected_event",
    [
        ("transfer-completed", "completed", "transferCompleted"),
        ("transfer-canceled", "canceled", "transferCanceled"),
        ("transfer-failed", "failed", "transferFailed"),
        ("transfer-attempt-failed", "initiated", "transferAttemptFailed"),
    ],
)
def test_transfer_status_events_update_held_transfer(
    task, recorder, transfer_payload, event_type, status, expected_event
) -> None:
    task.transfers.apply_outgoing(transfer_payload(), True)
    outgoing = task.transfers.outgoing
    recorders = listen_all(task, recorder)

    task.dispatch(
        event_type,
        transfer_payload(status=status, transfer_failed_reason="no answer", date_updated=1700000400),
    )

    assert task.transfers.outgoing is outgoing
    assert outgoing.status is TransferStatus(status)
    assert outgoing.transfer_failed_reason == "no answer"
    assert recorders[expected_event].calls == [(outgoing,)]
    assert all(not r.calls for name, r in recorders.items() if name != expected_event)


def test_transfer_status_event_applies_to_incoming_transfer(task, recorder, task_payload, transfer_payload) -> None:
    task.reconcile(task_payload(), {"incoming": transfer_payload(sid="TTin")})
    listener = recorder()
    task.on("transferCompleted", listener)

    task.dispatch("transfer-completed", transfer_payload(sid="TTin", status="completed"))

    assert task.transfers.incoming.status is TransferStatus.COMPLETED
    assert listener.calls == [(task.transfers.incoming,)]


def test_malformed_transfer_event_is_invalid_argument(task, transfer_payload) -> None:
    task.transfers.apply_outgoing(transfer_payload(), True)

    with pytest.raises(InvalidArgument):
        task.dispatch("transfer-completed", {"sid": "TTxxx", "status": "exploded"})

    assert task.transfers.outgoing.status is TransferStatus.INITIATED


def test_transfer_events_never_emit_task_events(task, recorder, transfer_payload) -> None:
    task.transfers.apply_outgoing(transfer_payload(), True)
    listener = recorder()
    task.on("transfer-completed", listener)

    task.dispatch("transfer-completed", transfer_payload(status="completed"))

    assert listener.calls == []


@pytest.mark.parametrize("order", ["task_first", "transfer_first"])
def test_task_and_transfer_updates_commute(task, task_payload, transfer_payload, order) -> None:
    task.transfers.apply_outgoing(transfer_payload(), True)
    task_update = task_payload(assignment_status="transferring", priority=7)
    transfer_event = transfer_payload(status="completed", date_updated=1700000500)

    if order == "task_first":
        task.reconcile(task_update)
        task.dispatch("transfer-completed", transfer_event)
    else:
        task.dispatch("transfer-completed", transfer_event)
        task.reconcile(task_update)

    assert task.status is TaskStatus.TRANSFERRING
    assert task.priority == 7
    assert task.transfers.outgoing.status is TransferStatus.COMPLETED
    assert task.transfers.outgoing.date_updated.timestamp() == 1700000500


def test_transfer_set_rejects_initiated_on_status_path(transfer_payload) -> None:
    transfers = TransferSet("WTxxx")
    transfers.apply_outgoing(transfer_payload(), True)

    with pytest.raises(InvalidArgument):
        transfers.apply_event("transfer-initiated", transfer_payload())
    with pytest.raises(InvalidArgument):
        transfers.apply_event("task.updated", transfer_payload())


def test_transfer_set_emits_on_its_own_registry(recorder, transfer_payload) -> None:
    transfers = TransferSet("WTxxx")
    outgoing = transfers.apply_outgoing(transfer_payload(), True)
    listener = recorder()
    transfers.on("transferCanceled", listener)

    result = transfers.apply_event("transferCanceled", transfer_payload(status="canceled"))

    assert isinstance(outgoing, OutgoingTransfer)
    assert result is outgoing
    assert listener.calls == [(outgoing,)]
    assert transfers.apply_event("transfer-canceled", transfer_payload(sid="TTother")) is None
