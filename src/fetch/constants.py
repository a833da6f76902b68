"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_SERVER_ERROR_MIN = 500
HTTP_STATUS_SERVER_ERROR_MAX = 600

# Status used for the placeholder response that stands in for a timed out attempt
SYNTHETIC_TIMEOUT_STATUS = 504
SYNTHETIC_RESPONSE_HEADER = "X-Poller-Synthetic"

# Request defaults
DEFAULT_METHOD = "GET"
DEFAULT_TIMEOUT_SECONDS = 4.0
JSON_MEDIA_TYPE = "application/json"

# Methods that carry a request body and get a JSON Content-Type by default
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
