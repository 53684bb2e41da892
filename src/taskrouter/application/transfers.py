from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from src.taskrouter.application.emitter import EventEmitter, Listener
from src.taskrouter.domain.events.task_event import TRANSFER_INITIATED, transfer_event_name
from src.taskrouter.domain.exceptions import InvalidArgument
from src.taskrouter.domain.models.transfer import (
    IncomingTransfer,
    OutgoingTransfer,
    Transfer,
    TransferDescriptor,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferUpdate:
    """Parsed transfer slots, ready to be committed onto a ``TransferSet``."""

    incoming: IncomingTransfer | None = None
    outgoing: OutgoingTransfer | None = None


class TransferSet:
    """
    Incoming and outgoing transfer state of a single task.

    Each slot holds at most one transfer. Events are applied only to the transfer
    whose sid they carry; anything else is logged and dropped.
    """

    def __init__(self, task_sid: str, emitter: EventEmitter | None = None) -> None:
        self._task_sid = task_sid
        self._emitter = emitter or EventEmitter()
        self.incoming: IncomingTransfer | None = None
        self.outgoing: OutgoingTransfer | None = None

    @property
    def task_sid(self) -> str:
        return self._task_sid

    def on(self, event: str, listener: Listener) -> None:
        self._emitter.on(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self._emitter.off(event, listener)

    def find(self, transfer_sid: Any) -> Transfer | None:
        """Return the held transfer whose sid equals ``transfer_sid``."""
        if not isinstance(transfer_sid, str) or not transfer_sid:
            return None
        if self.outgoing is not None and self.outgoing.sid == transfer_sid:
            return self.outgoing
        if self.incoming is not None and self.incoming.sid == transfer_sid:
            return self.incoming
        return None

    def prepare(self, latest_transfers_data: Mapping[str, Any]) -> TransferUpdate | None:
        """
        Parse the ``incoming``/``outgoing`` sub-payloads without touching local state.

        Returns ``None`` when neither sub-payload is present. Raises pydantic's
        ``ValidationError`` when a present sub-payload is malformed.
        """
        incoming_data = latest_transfers_data.get("incoming")
        outgoing_data = latest_transfers_data.get("outgoing")
        if not incoming_data and not outgoing_data:
            return None

        incoming = None
        if incoming_data:
            incoming = IncomingTransfer.from_descriptor(
                TransferDescriptor.model_validate(incoming_data)
            )
        outgoing = None
        if outgoing_data:
            outgoing = self._build_outgoing(outgoing_data)
        return TransferUpdate(incoming=incoming, outgoing=outgoing)

    def commit(self, update: TransferUpdate) -> None:
        if update.incoming is not None:
            self.incoming = update.incoming
        if update.outgoing is not None:
            self.outgoing = update.outgoing

    def apply_outgoing(
        self, payload: Mapping[str, Any], is_initial_transfer_result: bool = False
    ) -> OutgoingTransfer:
        """Replace the outgoing slot with a transfer built from ``payload``."""
        outgoing = self._build_outgoing(payload)
        self.outgoing = outgoing
        if is_initial_transfer_result:
            logger.info(
                "Outgoing transfer created",
                extra={"task_sid": self._task_sid, "transfer_sid": outgoing.sid},
            )
        else:
            logger.debug(
                "Outgoing transfer replaced from event",
                extra={"task_sid": self._task_sid, "transfer_sid": outgoing.sid},
            )
        return outgoing

    def apply_event(self, event_type: str, raw_event_data: Mapping[str, Any]) -> Transfer | None:
        """
        Apply a canceled/completed/failed/attempt-failed event to the matching transfer.

        Returns the updated transfer, or ``None`` when the event sid matches no held
        transfer. Such events are dropped without emitting anything. Only the
        initiated path may establish an outgoing transfer, so initiated events are
        rejected here.
        """
        event_name = transfer_event_name(event_type)
        if event_name is None or event_name == TRANSFER_INITIATED:
            raise InvalidArgument(f"'{event_type}' is not a transfer status event.")

        transfer = self.find(raw_event_data.get("sid"))
        if transfer is None:
            logger.debug(
                "Dropping transfer event for unknown transfer",
                extra={"task_sid": self._task_sid, "event_type": event_type},
            )
            return None

        transfer.apply_status(TransferDescriptor.model_validate(raw_event_data))
        self._emitter.emit(event_name, transfer)
        return transfer

    def _build_outgoing(self, payload: Mapping[str, Any]) -> OutgoingTransfer:
        return OutgoingTransfer.from_descriptor(
            TransferDescriptor.model_validate(payload), task_sid=self._task_sid
        )
