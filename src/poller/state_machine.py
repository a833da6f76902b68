"""State machine tracking the freshness of a poller's cached data."""

from enum import Enum

import structlog

from src.poller.constants import COMPONENT_POLLER


logger = structlog.get_logger()


class PollerState(str, Enum):
    """Freshness of the cached data.

    - INITIAL: No fetch cycle has completed yet
    - FRESH: Cached data reflects the most recent successful fetch
    - STALE: Cached data is from an earlier success; the latest fetch failed
    - ERRORING: No fetch has ever succeeded; cached data is the default
    """

    INITIAL = "initial"
    FRESH = "fresh"
    STALE = "stale"
    ERRORING = "erroring"


class Outcome(str, Enum):
    """Result of a fetch cycle as seen by the state machine."""

    SUCCESS = "success"
    FAILURE = "failure"


# Complete transition table; there is no terminal state
_TRANSITIONS: dict[tuple[PollerState, Outcome], PollerState] = {
    (PollerState.INITIAL, Outcome.SUCCESS): PollerState.FRESH,
    (PollerState.INITIAL, Outcome.FAILURE): PollerState.ERRORING,
    (PollerState.ERRORING, Outcome.SUCCESS): PollerState.FRESH,
    (PollerState.ERRORING, Outcome.FAILURE): PollerState.ERRORING,
    (PollerState.FRESH, Outcome.SUCCESS): PollerState.FRESH,
    (PollerState.FRESH, Outcome.FAILURE): PollerState.STALE,
    (PollerState.STALE, Outcome.SUCCESS): PollerState.FRESH,
    (PollerState.STALE, Outcome.FAILURE): PollerState.STALE,
}


def next_state(current: PollerState, outcome: Outcome) -> PollerState:
    """Compute the state that follows a fetch cycle outcome.

    Args:
        current: State before the cycle settled.
        outcome: Whether the cycle succeeded.

    Returns:
        The new state.
    """
    return _TRANSITIONS[(current, outcome)]


class PollerStateMachine:
    """Holds the current poller state and applies cycle outcomes.

    Logs every state change at debug level.
    """

    def __init__(
        self,
        url: str,
        initial_state: PollerState = PollerState.INITIAL,
    ) -> None:
        """Initialize the state machine.

        Args:
            url: URL of the poller, for log context.
            initial_state: Starting state.
        """
        self._state = initial_state
        self._log = logger.bind(component=COMPONENT_POLLER, url=url)

    @property
    def state(self) -> PollerState:
        """Get the current state."""
        return self._state

    @property
    def has_succeeded(self) -> bool:
        """Check if the cached data came from a successful fetch."""
        return self._state in (PollerState.FRESH, PollerState.STALE)

    def apply(self, outcome: Outcome) -> PollerState:
        """Apply a cycle outcome.

        Args:
            outcome: Result of the fetch cycle.

        Returns:
            The new state.
        """
        old_state = self._state
        self._state = next_state(old_state, outcome)

        if self._state != old_state:
            self._log.debug(
                "state_transition",
                from_state=old_state.value,
                to_state=self._state.value,
            )

        return self._state

    def succeed(self) -> PollerState:
        """Apply a successful outcome."""
        return self.apply(Outcome.SUCCESS)

    def fail(self) -> PollerState:
        """Apply a failed outcome."""
        return self.apply(Outcome.FAILURE)
