class TaskRouterError(Exception):
    """Base class for errors raised by the task entity model."""


class InvalidArgument(TaskRouterError, ValueError):
    """Raised when caller input or an event payload is malformed."""


class UnknownRoute(TaskRouterError):
    """Raised when a route name is not registered in the route table."""

    def __init__(self, route_name: str) -> None:
        super().__init__(f"Route '{route_name}' does not exist.")
        self.route_name = route_name


class ArgumentCountMismatch(TaskRouterError):
    """Raised when a route is resolved with the wrong number of positional arguments."""

    def __init__(self, route_name: str, expected: int, received: int) -> None:
        super().__init__(
            f"Route '{route_name}' expects {expected} positional argument(s), got {received}."
        )
        self.route_name = route_name
        self.expected = expected
        self.received = received


class RemoteCallFailed(TaskRouterError):
    """Raised when a request to the task routing service fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReconciliationFailed(TaskRouterError):
    """Raised when a server payload cannot be applied to a local entity."""

    def __init__(self, sid: str | None, reason: object) -> None:
        super().__init__(f"Failed to update Task sid={sid}. Update aborted. Error: {reason}.")
        self.sid = sid
