from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from src.taskrouter.domain.events.task_event import TaskEvent


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def encode_event(event: TaskEvent) -> dict[str, str | bytes]:
    return {
        "event_id": event.event_id,
        "type": event.type,
        "task_sid": event.task_sid,
        "ts": event.ts.isoformat(),
        "payload": json.dumps(event.payload),
    }


def decode_event(fields: dict[str, Any]) -> TaskEvent:
    payload_str = _as_str(fields.get("payload", "{}"))
    try:
        payload = json.loads(payload_str)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid payload JSON") from exc

    try:
        ts = datetime.fromisoformat(_as_str(fields.get("ts", "")))
    except ValueError as exc:
        raise ValueError("Invalid event timestamp") from exc

    event_data = {
        "event_id": _as_str(fields.get("event_id", "")),
        "type": _as_str(fields.get("type", "")),
        "task_sid": _as_str(fields.get("task_sid", "")),
        "ts": ts,
        "payload": payload,
    }
    try:
        return TaskEvent.model_validate(event_data)
    except ValidationError as exc:
        raise ValueError("Invalid event schema") from exc
