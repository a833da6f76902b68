"""Data models for the HTTP fetch layer."""

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.fetch.constants import (
    BODY_METHODS,
    DEFAULT_METHOD,
    DEFAULT_TIMEOUT_SECONDS,
    JSON_MEDIA_TYPE,
)


class FetchErrorClass(str, Enum):
    """Classification of fetch cycle failures for logging and metrics.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection
    - SSL_ERROR: SSL/TLS certificate or handshake error
    - HTTP_4XX: 4xx client error (except 429)
    - HTTP_5XX: 5xx server error
    - RATE_LIMITED: 429 Too Many Requests
    - DECODE_ERROR: Response body could not be decoded
    - PARSE_ERROR: The configured data parser raised
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SSL_ERROR = "SSL_ERROR"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    RATE_LIMITED = "RATE_LIMITED"
    DECODE_ERROR = "DECODE_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    UNKNOWN = "UNKNOWN"


def _has_header(headers: dict[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(key.lower() == lowered for key in headers)


class FetchOptions(BaseModel):
    """Per-request options handed to the transport.

    ``retry`` is the number of additional attempts the retrying fetch may
    make after a not-ok response. It is stripped before the options reach
    the transport.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: Annotated[str, Field(min_length=1)] = DEFAULT_METHOD
    headers: dict[str, str] = Field(
        default_factory=dict, description="Request headers"
    )
    timeout_seconds: Annotated[float | None, Field(gt=0.0)] = None
    retry: Annotated[int, Field(ge=0)] = 0
    body: str | bytes | None = Field(
        default=None, description="Request payload for POST-like polls"
    )

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Upper-case the HTTP method."""
        return v.strip().upper()

    @property
    def wants_retry(self) -> bool:
        """Check if the retrying fetch should be used."""
        return self.retry > 0

    def with_defaults(self) -> "FetchOptions":
        """Return a copy with derived defaults filled in.

        Adds ``Accept: application/json`` when no Accept header is set,
        ``Content-Type: application/json`` for body-carrying methods
        without one, and the default timeout when none is given.

        Returns:
            New FetchOptions instance.
        """
        headers = dict(self.headers)
        if not _has_header(headers, "Accept"):
            headers["Accept"] = JSON_MEDIA_TYPE
        if self.method in BODY_METHODS and not _has_header(headers, "Content-Type"):
            headers["Content-Type"] = JSON_MEDIA_TYPE

        timeout = self.timeout_seconds
        if timeout is None:
            timeout = DEFAULT_TIMEOUT_SECONDS

        return self.model_copy(update={"headers": headers, "timeout_seconds": timeout})

    def without_retry(self) -> "FetchOptions":
        """Return a copy with the retry count removed."""
        return self.model_copy(update={"retry": 0})

    def request_kwargs(self, url: str) -> dict[str, Any]:
        """Build keyword arguments for ``httpx.AsyncClient.request``.

        Args:
            url: Target URL.

        Returns:
            Keyword arguments dictionary.
        """
        kwargs: dict[str, Any] = {
            "method": self.method,
            "url": url,
            "headers": dict(self.headers),
        }
        if self.body is not None:
            kwargs["content"] = self.body
        if self.timeout_seconds is not None:
            kwargs["timeout"] = self.timeout_seconds
        return kwargs
