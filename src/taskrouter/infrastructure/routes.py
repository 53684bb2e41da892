from __future__ import annotations

from dataclasses import dataclass

from src.taskrouter.domain.exceptions import ArgumentCountMismatch, InvalidArgument, UnknownRoute

PLACEHOLDER = "%s"

ACTIVITIES_LIST = "activitiesList"
WORKER_INSTANCE = "workerInstance"
WORKER_LIST = "workerList"
RESERVATION_INSTANCE = "reservationInstance"
RESERVATION_LIST = "reservationList"
TASK_LIST = "taskList"
TASK_INSTANCE = "taskInstance"
TASK_TRANSFER_LIST = "taskTransferList"
TASK_TRANSFER_INSTANCE = "taskTransferInstance"
TASK_RESERVATION_INSTANCE = "taskReservationInstance"
TASKQUEUE_LIST = "taskQueueList"
WORKER_CHANNELS = "workerChannels"
CUSTOMER_PARTICIPANT_INSTANCE = "customerParticipantInstance"
WORKER_PARTICIPANT_INSTANCE = "workerParticipantInstance"
HOLD_WORKER_PARTICIPANT_INSTANCE = "holdWorkerParticipantInstance"
KICK_WORKER_PARTICIPANT = "kickWorkerParticipant"

_SLOT = object()


@dataclass(frozen=True)
class Route:
    name: str
    path: str


class RouteTable:
    """Registry mapping symbolic route names to workspace/worker scoped resource paths."""

    def __init__(self, workspace_sid: str, worker_sid: str) -> None:
        if not isinstance(workspace_sid, str) or not workspace_sid:
            raise InvalidArgument("RouteTable requires a non-empty <string>workspace_sid.")
        if not isinstance(worker_sid, str) or not worker_sid:
            raise InvalidArgument("RouteTable requires a non-empty <string>worker_sid.")

        self._workspace_sid = workspace_sid
        self._worker_sid = worker_sid

        workspace = ("Workspaces", workspace_sid)
        worker = (*workspace, "Workers", worker_sid)
        # Segments are kept apart so that sids are never mistaken for placeholders.
        self._templates: dict[str, tuple[object, ...]] = {
            ACTIVITIES_LIST: (*workspace, "Activities"),
            WORKER_INSTANCE: worker,
            WORKER_LIST: (*workspace, "Workers"),
            RESERVATION_INSTANCE: (*worker, "Reservations", _SLOT),
            RESERVATION_LIST: (*worker, "Reservations"),
            TASK_LIST: (*workspace, "Tasks"),
            TASK_INSTANCE: (*workspace, "Tasks", _SLOT),
            TASK_TRANSFER_LIST: (*worker, "Transfers"),
            TASK_TRANSFER_INSTANCE: (*worker, "Transfers", _SLOT),
            TASK_RESERVATION_INSTANCE: (*workspace, "Tasks", _SLOT, "Reservations", _SLOT),
            TASKQUEUE_LIST: (*workspace, "TaskQueues"),
            WORKER_CHANNELS: (*worker, "WorkerChannels"),
            CUSTOMER_PARTICIPANT_INSTANCE: (*worker, "CustomerParticipant"),
            WORKER_PARTICIPANT_INSTANCE: (*worker, "WorkerParticipant"),
            HOLD_WORKER_PARTICIPANT_INSTANCE: (*worker, "HoldWorkerParticipant"),
            KICK_WORKER_PARTICIPANT: (*worker, "KickWorkerParticipant"),
        }

    @property
    def workspace_sid(self) -> str:
        return self._workspace_sid

    @property
    def worker_sid(self) -> str:
        return self._worker_sid

    def names(self) -> list[str]:
        return list(self._templates)

    def placeholder_count(self, route_name: str) -> int:
        return sum(1 for segment in self._segments(route_name) if segment is _SLOT)

    def resolve(self, route_name: str, *args: str) -> Route:
        """
        Resolve ``route_name`` into a concrete path.

        Placeholders are consumed strictly left to right, one per argument. Arguments are
        inserted verbatim; escaping is left to the transport.
        """
        segments = self._segments(route_name)
        expected = self.placeholder_count(route_name)
        if len(args) != expected:
            raise ArgumentCountMismatch(route_name, expected, len(args))

        remaining = iter(args)
        parts = [str(next(remaining)) if segment is _SLOT else str(segment) for segment in segments]
        return Route(name=route_name, path="/".join(parts))

    def _segments(self, route_name: str) -> tuple[object, ...]:
        try:
            return self._templates[route_name]
        except (KeyError, TypeError) as exc:
            raise UnknownRoute(str(route_name)) from exc
