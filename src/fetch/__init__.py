"""HTTP fetch layer for the poller.

This module provides:
- A transport capability with an httpx-backed default
- Response classification and JSON/text body decoding
- HttpError for non-2xx responses with lazy body access
- A bounded, delay-free retrying fetch with a cancellable budget
- Header and URL redaction for logging
- Metrics collection for observability
"""

from src.fetch.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    SYNTHETIC_TIMEOUT_STATUS,
)
from src.fetch.errors import HttpError, classify_exception
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchErrorClass, FetchOptions
from src.fetch.redact import redact_headers, redact_url_credentials
from src.fetch.response import classify_status, decode_body, is_json, is_ok
from src.fetch.retry import (
    PendingFetch,
    RetryBudget,
    eager_fetch,
    fetch_with_retry,
    is_synthetic_response,
    synthetic_timeout_response,
)
from src.fetch.transport import HttpxTransport, Transport, fetch_once


__all__ = [
    # Transport
    "Transport",
    "HttpxTransport",
    "fetch_once",
    # Retry
    "PendingFetch",
    "RetryBudget",
    "eager_fetch",
    "fetch_with_retry",
    "is_synthetic_response",
    "synthetic_timeout_response",
    # Classification
    "is_ok",
    "is_json",
    "decode_body",
    "classify_status",
    "classify_exception",
    # Models
    "FetchOptions",
    "FetchErrorClass",
    "HttpError",
    # Constants
    "DEFAULT_TIMEOUT_SECONDS",
    "HTTP_STATUS_OK_MIN",
    "HTTP_STATUS_OK_MAX",
    "SYNTHETIC_TIMEOUT_STATUS",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
