from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Configuration for the worker session talking to the routing service."""
    WORKSPACE_SID: str
    WORKER_SID: str
    API_BASE_URL: str = "https://taskrouter.twilio.com"
    AUTH_TOKEN: str | None = None
    REQUEST_TIMEOUT_SEC: float = 10.0
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(env_file=".env", extra="ignore")


def get_client_settings() -> ClientSettings:
    return ClientSettings()  # type: ignore[call-arg]
