from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """Explicit callback registry; listeners run synchronously in registration order."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def once(self, event: str, listener: Listener) -> None:
        def _once(*args: Any) -> Any:
            self.off(event, _once)
            return listener(*args)

        _once.listener = listener  # type: ignore[attr-defined]
        self.on(event, _once)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        for registered in listeners:
            if registered is listener or getattr(registered, "listener", None) is listener:
                listeners.remove(registered)
                break
        if not listeners:
            self._listeners.pop(event, None)

    def emit(self, event: str, *args: Any) -> bool:
        listeners = list(self._listeners.get(event, ()))
        if not listeners:
            logger.debug("No listeners registered for event", extra={"event": event})
            return False
        for listener in listeners:
            listener(*args)
        return True
