"""Error types for the fetch layer."""

import json
import ssl
from typing import Any
from urllib.parse import SplitResult, parse_qs, urlsplit

import httpx

from src.fetch.models import FetchErrorClass
from src.fetch.redact import redact_url_credentials
from src.fetch.response import classify_status, decode_body, is_timeout_error


class HttpError(Exception):
    """Raised for a response whose status is not 2xx.

    Keeps a reference to the offending response so callers can inspect
    the body on demand. The body is not decoded at construction time.
    """

    def __init__(self, url: str, method: str, response: httpx.Response) -> None:
        """Initialize the HTTP error.

        Args:
            url: Target URL of the request.
            method: HTTP method used.
            response: The not-ok response.
        """
        self.message = f"HTTP Error {response.status_code} {response.reason_phrase}"
        super().__init__(self.message)
        self.raw_url = url
        self.url: SplitResult = urlsplit(url)
        self.query: dict[str, list[str]] = parse_qs(self.url.query)
        self.method = method.upper()
        self._response = response

    @property
    def response(self) -> httpx.Response:
        """Get the offending response."""
        return self._response

    @property
    def status(self) -> int:
        """Get the HTTP status code."""
        return self._response.status_code

    @property
    def reason(self) -> str:
        """Get the HTTP reason phrase."""
        return self._response.reason_phrase

    @property
    def error_class(self) -> FetchErrorClass:
        """Get the error classification for the status code."""
        return classify_status(self.status) or FetchErrorClass.UNKNOWN

    def response_body(self) -> Any:
        """Decode the response body as JSON or text based on content-type.

        Returns:
            Parsed JSON value, or the body text.
        """
        return decode_body(self._response)

    def to_dict(self) -> dict[str, str | int]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "status": self.status,
            "method": self.method,
            "url": redact_url_credentials(self.raw_url),
        }


def classify_exception(error: BaseException) -> FetchErrorClass:
    """Classify an exception raised during a fetch cycle.

    Args:
        error: The exception to classify.

    Returns:
        Error class for logging and metrics.
    """
    if isinstance(error, HttpError):
        return error.error_class
    if is_timeout_error(error):
        return FetchErrorClass.NETWORK_TIMEOUT
    if isinstance(error, ssl.SSLError):
        return FetchErrorClass.SSL_ERROR
    if isinstance(error, httpx.ConnectError):
        message = str(error).lower()
        if "ssl" in message or "certificate" in message:
            return FetchErrorClass.SSL_ERROR
        return FetchErrorClass.CONNECTION_ERROR
    if isinstance(error, httpx.NetworkError):
        return FetchErrorClass.CONNECTION_ERROR
    if isinstance(error, json.JSONDecodeError | UnicodeDecodeError | httpx.DecodingError):
        return FetchErrorClass.DECODE_ERROR
    return FetchErrorClass.UNKNOWN
