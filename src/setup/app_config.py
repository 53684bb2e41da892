import inject

from src.setup.client_config import ClientSettings, get_client_settings
from src.setup.logging_config import configure_logging
from src.taskrouter.application.registry import TaskRegistry
from src.taskrouter.domain.repositories import RequestClient
from src.taskrouter.infrastructure.http.client import HttpRequestClient
from src.taskrouter.infrastructure.routes import RouteTable


def build_binder_config(settings: ClientSettings):
    """Return an ``inject`` configuration binding the client collaborators."""
    routes = RouteTable(settings.WORKSPACE_SID, settings.WORKER_SID)
    request = HttpRequestClient(
        settings.API_BASE_URL,
        token=settings.AUTH_TOKEN,
        timeout=settings.REQUEST_TIMEOUT_SEC,
    )
    registry = TaskRegistry()

    def _config(binder: inject.Binder) -> None:
        binder.bind(RouteTable, routes)
        binder.bind(RequestClient, request)
        binder.bind(TaskRegistry, registry)

    return _config


def configure_di(settings: ClientSettings | None = None) -> None:
    """Configure the DI container once per process."""
    if inject.is_configured():
        return
    if settings is None:
        settings = get_client_settings()
    configure_logging(settings.LOG_LEVEL)
    inject.configure(build_binder_config(settings))
