from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any


def decode_json_object(value: Any) -> Any:
    """Decode mappings that the service sends JSON-encoded inside a string field."""
    if value is None:
        return {}
    if isinstance(value, str):
        if not value.strip():
            return {}
        decoded = json.loads(value)
        if not isinstance(decoded, dict):
            raise ValueError("Expected a JSON object")
        return decoded
    return value


def decode_timestamp(value: Any) -> Any:
    # Epoch seconds on the wire; ISO strings are left to pydantic.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=UTC)
    return value
