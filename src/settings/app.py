"""Application settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.fetch.constants import DEFAULT_TIMEOUT_SECONDS
from src.poller.constants import DEFAULT_REFRESH_INTERVAL_MS


class PollerSettings(BaseSettings):
    """Environment defaults for the command line poller.

    Read from ``POLLER_*`` variables or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="POLLER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    refresh_interval_ms: Annotated[int, Field(gt=0)] = DEFAULT_REFRESH_INTERVAL_MS
    timeout_seconds: Annotated[float, Field(gt=0.0)] = DEFAULT_TIMEOUT_SECONDS
    retry: Annotated[int, Field(ge=0)] = 0
    log_level: str = "INFO"
    json_logs: bool = True


def get_settings() -> PollerSettings:
    """Get a settings instance."""
    return PollerSettings()
