"""Error types for the poller."""

from src.poller.constants import ALREADY_RUNNING_MESSAGE


class PollerConfigError(ValueError):
    """Raised when a poller is constructed with an invalid configuration."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details (loc, msg, type).
        """
        self.errors = errors
        details = "; ".join(f"{err['loc']}: {err['msg']}" for err in errors)
        super().__init__(f"Invalid poller configuration: {details}")


class PollerAlreadyRunningError(RuntimeError):
    """Raised when starting a poller whose schedule is already active."""

    def __init__(self, url: str) -> None:
        """Initialize the error.

        Args:
            url: URL of the poller that was started twice.
        """
        self.url = url
        super().__init__(ALREADY_RUNNING_MESSAGE)
