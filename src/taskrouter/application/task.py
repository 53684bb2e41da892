from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

import inject
from pydantic import ValidationError

from src.taskrouter.application.emitter import EventEmitter, Listener
from src.taskrouter.application.transfers import TransferSet
from src.taskrouter.domain.events.task_event import (
    TRANSFER_INITIATED,
    task_event_name,
    transfer_event_name,
)
from src.taskrouter.domain.exceptions import InvalidArgument, ReconciliationFailed
from src.taskrouter.domain.models.api_version import ApiVersion
from src.taskrouter.domain.models.task_descriptor import TaskDescriptor
from src.taskrouter.domain.models.task_status import TaskStatus
from src.taskrouter.domain.models.transfer import TransferMode
from src.taskrouter.domain.repositories import RequestClient
from src.taskrouter.infrastructure.routes import (
    CUSTOMER_PARTICIPANT_INSTANCE,
    HOLD_WORKER_PARTICIPANT_INSTANCE,
    KICK_WORKER_PARTICIPANT,
    TASK_INSTANCE,
    TASK_TRANSFER_LIST,
    RouteTable,
)

logger = logging.getLogger(__name__)

OptionSchema = Mapping[str, Callable[[Any], bool]]

_PARTICIPANT_OPTIONS: OptionSchema = {
    "hold": lambda value: isinstance(value, bool),
}

_TRANSFER_OPTIONS: OptionSchema = {
    "attributes": lambda value: value is None or isinstance(value, (Mapping, str)),
    "mode": lambda value: value is None or _is_transfer_mode(value),
    "priority": lambda value: value is None or (isinstance(value, int) and not isinstance(value, bool)),
}

_WRAP_UP_OPTIONS: OptionSchema = {
    "reason": lambda value: value is None or isinstance(value, str),
}


def _is_transfer_mode(value: Any) -> bool:
    try:
        TransferMode(value)
    except ValueError:
        return False
    return True


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _validate_options(options: Any, types: OptionSchema) -> bool:
    """Return True when every key of ``options`` is known and its value passes its check."""
    if not isinstance(options, Mapping):
        return False
    return all(key in types and types[key](value) for key, value in options.items())


class Task:
    """
    A unit of work reserved for, or assigned to, the current worker.

    Local fields are server-authoritative: every successful command response and
    every reconciled event overwrites them wholesale. Commands are coroutines; the
    response of each one is applied without awaiting, so two reconciliations never
    interleave on the event loop. Transfer state lives in ``transfers`` and only
    changes through the transfer paths.
    """

    def __init__(
        self,
        reservation_sid: str,
        descriptor: TaskDescriptor,
        *,
        request: RequestClient | None = None,
        routes: RouteTable | None = None,
    ) -> None:
        if not isinstance(descriptor, TaskDescriptor):
            raise InvalidArgument("Failed to instantiate Task. <TaskDescriptor>descriptor is required.")
        if not _is_non_empty_str(reservation_sid):
            raise InvalidArgument("Failed to instantiate Task. <string>reservation_sid is required.")

        self._request = request or inject.instance(RequestClient)
        self._routes = routes or inject.instance(RouteTable)
        self._emitter = EventEmitter()
        self._sid = descriptor.sid
        self._reservation_sid = reservation_sid
        self.date_created: datetime = descriptor.date_created
        self.transfers = TransferSet(descriptor.sid, self._emitter)
        self._apply(descriptor)

    @property
    def sid(self) -> str:
        return self._sid

    @property
    def reservation_sid(self) -> str:
        return self._reservation_sid

    def on(self, event: str, listener: Listener) -> None:
        self._emitter.on(event, listener)

    def once(self, event: str, listener: Listener) -> None:
        self._emitter.once(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._emitter.off(event, listener)

    async def complete(self, reason: str) -> Task:
        """Set the assignment status to ``completed``."""
        if not _is_non_empty_str(reason):
            raise InvalidArgument("Error calling method complete(). <string>reason is a required parameter.")

        path = self._routes.resolve(TASK_INSTANCE, self._sid).path
        params = {
            "AssignmentStatus": TaskStatus.COMPLETED.value,
            "Reason": reason,
        }
        response = await self._request.post(path, params, ApiVersion.V1)
        return self.reconcile(response)

    async def wrap_up(self, options: Mapping[str, Any] | None = None) -> Task:
        """Set the assignment status to ``wrapping``; ``options`` may carry a ``reason``."""
        options = {} if options is None else options
        if not _validate_options(options, _WRAP_UP_OPTIONS):
            raise InvalidArgument(f"Failed to call wrap_up() on Task sid={self._sid}. A <string>reason is required.")

        path = self._routes.resolve(TASK_INSTANCE, self._sid).path
        params: dict[str, Any] = {"AssignmentStatus": TaskStatus.WRAPPING.value}
        if options.get("reason"):
            params["Reason"] = options["reason"]

        response = await self._request.post(path, params, ApiVersion.V1)
        return self.reconcile(response)

    async def set_attributes(self, attributes: Mapping[str, Any]) -> Task:
        """Replace the task attributes on the server with ``attributes``."""
        if not isinstance(attributes, Mapping):
            raise InvalidArgument("Unable to set attributes on Task. <object>attributes is a required parameter.")

        path = self._routes.resolve(TASK_INSTANCE, self._sid).path
        params = {"Attributes": dict(attributes)}
        response = await self._request.post(path, params, ApiVersion.V1)
        return self.reconcile(response)

    async def update_participant(self, options: Mapping[str, Any]) -> Task:
        """Update the customer leg of the conference tied to this task."""
        if not _validate_options(options, _PARTICIPANT_OPTIONS):
            raise InvalidArgument(
                f"Failed to update customer participant tied to Task sid={self._sid}. "
                "The options passed in did not match the required types."
            )

        path = self._routes.resolve(CUSTOMER_PARTICIPANT_INSTANCE).path
        params: dict[str, Any] = {"TaskSid": self._sid}
        for option, value in options.items():
            params[option[:1].upper() + option[1:]] = value

        response = await self._request.post(path, params, ApiVersion.V2)
        return self.reconcile(response)

    async def kick(self, worker_sid: str) -> Task:
        """Remove the call leg of ``worker_sid`` from the conference."""
        if not _is_non_empty_str(worker_sid):
            raise InvalidArgument("Error calling method kick(). <string>worker_sid is a required parameter.")

        path = self._routes.resolve(KICK_WORKER_PARTICIPANT).path
        params = {
            "TaskSid": self._sid,
            "TargetWorkerSid": worker_sid,
        }
        response = await self._request.post(path, params, ApiVersion.V2)
        return self.reconcile(response)

    async def hold(self, target_worker_sid: str, on_hold: bool) -> Task:
        """Hold or unhold the call leg of ``target_worker_sid``."""
        if not _is_non_empty_str(target_worker_sid):
            raise InvalidArgument("Error calling method hold(). <string>target_worker_sid is a required parameter.")
        if not isinstance(on_hold, bool):
            raise InvalidArgument("Error calling method hold(). <boolean>on_hold is a required parameter.")

        path = self._routes.resolve(HOLD_WORKER_PARTICIPANT_INSTANCE).path
        params = {
            "TaskSid": self._sid,
            "TargetWorkerSid": target_worker_sid,
            "Hold": on_hold,
        }
        response = await self._request.post(path, params, ApiVersion.V2)
        return self.reconcile(response)

    async def transfer(self, to: str, options: Mapping[str, Any] | None = None) -> Task:
        """
        Transfer the task to a Worker or TaskQueue.

        ``options`` may carry ``attributes``, ``mode`` (``WARM`` or ``COLD``) and
        ``priority``; each is sent only when present. The response describes the
        transfer, so it replaces ``transfers.outgoing`` instead of the task fields.
        """
        if not _is_non_empty_str(to):
            raise InvalidArgument("Error calling method transfer(). <string>to is a required parameter.")
        options = {} if options is None else options
        if not _validate_options(options, _TRANSFER_OPTIONS):
            raise InvalidArgument(
                f"Failed to transfer Task sid={self._sid}. "
                "The options passed in did not match the required types."
            )

        path = self._routes.resolve(TASK_TRANSFER_LIST).path
        params: dict[str, Any] = {
            "ReservationSid": self._reservation_sid,
            "TaskSid": self._sid,
            "To": to,
        }
        if options.get("attributes") is not None:
            attributes = options["attributes"]
            params["Attributes"] = attributes if isinstance(attributes, str) else dict(attributes)
        if options.get("mode") is not None:
            params["Mode"] = TransferMode(options["mode"]).value
        if options.get("priority") is not None:
            params["Priority"] = options["priority"]

        response = await self._request.post(path, params, ApiVersion.V2)
        try:
            self.transfers.apply_outgoing(response, True)
        except ValidationError as exc:
            logger.error(
                "Failed to apply transfer response",
                extra={"task_sid": self._sid, "to": to},
            )
            raise ReconciliationFailed(self._sid, exc) from exc
        logger.info("Completed transfer to Worker/TaskQueue=%s", to, extra={"task_sid": self._sid})
        return self

    def reconcile(
        self,
        latest_task_data: Mapping[str, Any],
        latest_transfers_data: Mapping[str, Any] | None = None,
    ) -> Task:
        """
        Overwrite local state with the latest server payload.

        Transfers are touched only when ``latest_transfers_data`` carries an
        ``incoming`` or ``outgoing`` sub-payload. Nothing is applied unless every
        part of the update parses.
        """
        if latest_transfers_data is not None and not isinstance(latest_transfers_data, Mapping):
            raise InvalidArgument("Error calling reconcile(). <object>latest_transfers_data must be a mapping.")
        sid = latest_task_data.get("sid") if isinstance(latest_task_data, Mapping) else None
        try:
            descriptor = TaskDescriptor.model_validate(latest_task_data)
            transfers_update = self.transfers.prepare(latest_transfers_data or {})
        except ValidationError as exc:
            logger.error("Failed to update Task sid=%s. Update aborted.", sid, exc_info=exc)
            raise ReconciliationFailed(sid, exc) from exc

        if descriptor.sid != self._sid:
            logger.error("Refusing update for Task sid=%s from payload sid=%s", self._sid, descriptor.sid)
            raise ReconciliationFailed(descriptor.sid, f"payload does not belong to Task sid={self._sid}")

        self._apply(descriptor)
        if transfers_update is not None:
            self.transfers.commit(transfers_update)
        return self

    def dispatch(self, event_type: str, raw_event_data: Mapping[str, Any]) -> None:
        """Entry point for push events addressed to this task."""
        if not _is_non_empty_str(event_type):
            raise InvalidArgument("Error calling dispatch(). <string>event_type is a required parameter.")
        if not isinstance(raw_event_data, Mapping):
            raise InvalidArgument("Error calling dispatch(). <object>raw_event_data is a required parameter.")

        logger.debug("dispatch(%s, %s)", event_type, dict(raw_event_data), extra={"task_sid": self._sid})
        transfer_event = transfer_event_name(event_type)
        if transfer_event is not None:
            self._dispatch_transfer_event(transfer_event, raw_event_data)
            return
        self._emitter.emit(task_event_name(event_type), self)

    def _dispatch_transfer_event(self, event_name: str, raw_event_data: Mapping[str, Any]) -> None:
        transfer_sid = raw_event_data.get("sid")
        if event_name == TRANSFER_INITIATED:
            outgoing = self.transfers.outgoing
            if outgoing is None or outgoing.sid != transfer_sid:
                logger.debug(
                    "The outgoing transfer is either not present or does not match the transfer sid in the event",
                    extra={"task_sid": self._sid, "transfer_sid": transfer_sid},
                )
                return
            try:
                outgoing = self.transfers.apply_outgoing(raw_event_data)
            except ValidationError as exc:
                raise InvalidArgument(f"Malformed {event_name} event for Task sid={self._sid}: {exc}") from exc
            self._emitter.emit(TRANSFER_INITIATED, outgoing)
            return

        if self.transfers.find(transfer_sid) is None:
            logger.debug(
                "No held transfer matches the transfer sid in the event",
                extra={"task_sid": self._sid, "transfer_sid": transfer_sid},
            )
            return
        try:
            self.transfers.apply_event(event_name, raw_event_data)
        except ValidationError as exc:
            raise InvalidArgument(f"Malformed {event_name} event for Task sid={self._sid}: {exc}") from exc

    def _apply(self, descriptor: TaskDescriptor) -> None:
        self.attributes: dict[str, Any] = dict(descriptor.attributes)
        self.status: TaskStatus = descriptor.status
        self.workflow_sid: str = descriptor.workflow_sid
        self.workflow_name: str | None = descriptor.workflow_name
        self.queue_sid: str = descriptor.queue_sid
        self.queue_name: str | None = descriptor.queue_name
        self.priority: int = descriptor.priority
        self.reason: str | None = descriptor.reason
        self.routing_target: str | None = descriptor.routing_target
        self.timeout: int = descriptor.timeout
        self.task_channel_sid: str | None = descriptor.task_channel_sid
        self.task_channel_unique_name: str | None = descriptor.task_channel_unique_name
        self.age: int = descriptor.age
        self.add_ons: dict[str, Any] = dict(descriptor.add_ons)
        self.date_updated: datetime = descriptor.date_updated

    def __repr__(self) -> str:
        return f"Task(sid={self._sid!r}, status={self.status.value!r})"
