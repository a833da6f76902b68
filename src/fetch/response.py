"""Response classification and body decoding."""

from typing import Any

import httpx

from src.fetch.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from src.fetch.models import FetchErrorClass


def is_ok(response: httpx.Response) -> bool:
    """Check if a response reports success (2xx)."""
    return HTTP_STATUS_OK_MIN <= response.status_code < HTTP_STATUS_OK_MAX


def is_json(response: httpx.Response) -> bool:
    """Check if the response content-type names a JSON media type.

    Substring match, so ``application/json; charset=utf-8`` and
    ``application/vnd.api+json`` both qualify.
    """
    content_type = response.headers.get("content-type", "")
    return "json" in content_type.lower()


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON or text based on its content-type.

    Args:
        response: A response whose body has been read.

    Returns:
        Parsed JSON value, or the body text.

    Raises:
        json.JSONDecodeError: If a JSON response carries an invalid body.
    """
    if is_json(response):
        return response.json()
    return response.text


def classify_status(status_code: int) -> FetchErrorClass | None:
    """Classify an HTTP status code.

    Args:
        status_code: HTTP status code.

    Returns:
        Error class for non-2xx codes, None for success.
    """
    if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
        return None

    if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
        return FetchErrorClass.RATE_LIMITED

    if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
        return FetchErrorClass.HTTP_4XX

    if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
        return FetchErrorClass.HTTP_5XX

    return FetchErrorClass.UNKNOWN


def is_timeout_error(error: BaseException) -> bool:
    """Check if an exception means the request timed out."""
    return isinstance(error, httpx.TimeoutException | TimeoutError)
