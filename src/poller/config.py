"""Configuration model for a poller."""

from collections.abc import Awaitable, Callable, Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.fetch.models import FetchOptions
from src.poller.constants import DEFAULT_REFRESH_INTERVAL_MS
from src.poller.errors import PollerConfigError


ParseData = Callable[[Any], Any | Awaitable[Any]]


def identity(value: Any) -> Any:
    """Default data parser: return the decoded body unchanged."""
    return value


class PollerConfig(BaseModel):
    """Configuration for a single poller.

    Immutable once validated. Derived request defaults (Accept and
    Content-Type headers, timeout) are filled into ``options`` during
    validation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Annotated[str, Field(min_length=1, description="URL to poll")]
    options: FetchOptions = Field(
        default_factory=FetchOptions,
        validate_default=True,
        description="Request options handed to the transport",
    )
    refresh_interval_ms: Annotated[int, Field(gt=0)] = DEFAULT_REFRESH_INTERVAL_MS
    parse_data: ParseData = Field(
        default=identity,
        description="Maps the decoded body to the cached value; may be async",
    )
    default_data: Any = Field(
        default=None, description="Cached value before the first successful fetch"
    )
    autostart: bool = False

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Reject blank URLs."""
        v = v.strip()
        if not v:
            msg = "url must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("options")
    @classmethod
    def apply_option_defaults(cls, v: FetchOptions) -> FetchOptions:
        """Fill in derived header and timeout defaults."""
        return v.with_defaults()

    @property
    def refresh_interval_seconds(self) -> float:
        """Get the refresh interval in seconds."""
        return self.refresh_interval_ms / 1000.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PollerConfig":
        """Validate a mapping of config fields.

        Args:
            raw: Config fields, e.g. ``{"url": ..., "refresh_interval_ms": ...}``.

        Returns:
            Validated PollerConfig.

        Raises:
            PollerConfigError: If validation fails.
        """
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as e:
            errors = [
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in e.errors()
            ]
            raise PollerConfigError(errors) from e
