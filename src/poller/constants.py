"""Constants for the poller."""

COMPONENT_POLLER = "poller"

# Refresh interval used when none is configured
DEFAULT_REFRESH_INTERVAL_MS = 60_000

# Emitted event names
EVENT_OK = "ok"
EVENT_DATA = "data"
EVENT_ERROR = "error"

# Event codes attached to degraded-state log lines
EVENT_CODE_DATA_STALE = "POLLER_DATA_STALE"
EVENT_CODE_DATA_DEFAULT = "POLLER_DATA_DEFAULT"

ALREADY_RUNNING_MESSAGE = "Could not start job because the service is already running"
