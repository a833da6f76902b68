"""Recurring-poll data source.

A Poller fetches a URL on a fixed schedule, caches the latest parsed
value and reports freshness through ``'ok'``, ``'data'`` and ``'error'``
events.
"""

from src.poller.config import PollerConfig, identity
from src.poller.constants import (
    DEFAULT_REFRESH_INTERVAL_MS,
    EVENT_CODE_DATA_DEFAULT,
    EVENT_CODE_DATA_STALE,
    EVENT_DATA,
    EVENT_ERROR,
    EVENT_OK,
)
from src.poller.errors import PollerAlreadyRunningError, PollerConfigError
from src.poller.events import Emitter, EventEmitter
from src.poller.metrics import PollerMetrics
from src.poller.poller import Poller
from src.poller.scheduler import RepeatingTimer
from src.poller.state_machine import (
    Outcome,
    PollerState,
    PollerStateMachine,
    next_state,
)


__all__ = [
    # Poller
    "Poller",
    "PollerConfig",
    "identity",
    # State machine
    "PollerState",
    "PollerStateMachine",
    "Outcome",
    "next_state",
    # Events
    "Emitter",
    "EventEmitter",
    "EVENT_OK",
    "EVENT_DATA",
    "EVENT_ERROR",
    "EVENT_CODE_DATA_STALE",
    "EVENT_CODE_DATA_DEFAULT",
    # Scheduling
    "RepeatingTimer",
    "DEFAULT_REFRESH_INTERVAL_MS",
    # Errors
    "PollerConfigError",
    "PollerAlreadyRunningError",
    # Metrics
    "PollerMetrics",
]
