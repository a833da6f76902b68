"""Transport counters shared by every poller in the process."""

from collections import Counter
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from src.fetch.models import FetchErrorClass


@dataclass
class FetchMetrics:
    """Counts what the transport layer did on behalf of pollers.

    One shared instance per process; tests call ``reset`` to start clean.
    A retrying fetch contributes one attempt per transport call, so
    ``attempts_total`` can exceed the number of poller cycles.
    """

    attempts_total: int = 0
    retries_total: int = 0
    timeouts_substituted_total: int = 0
    responses_by_status: Counter[int] = field(default_factory=Counter)
    failures_by_class: Counter[str] = field(default_factory=Counter)

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get the shared instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance."""
        cls._instance = None

    def record_attempt(self) -> None:
        """Count a transport call before it is made."""
        self.attempts_total += 1

    def record_response(self, status_code: int) -> None:
        """Count a response by its status code, ok or not."""
        self.responses_by_status[status_code] += 1

    def record_retry(self) -> None:
        """Count an attempt made after a not-ok response."""
        self.retries_total += 1

    def record_timeout_substitution(self) -> None:
        """Count a timed out attempt replaced by a synthetic response."""
        self.timeouts_substituted_total += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Count a transport call that raised instead of responding."""
        self.failures_by_class[error_class.value] += 1

    def to_dict(self) -> dict[str, Any]:
        """Snapshot every counter, with counters as plain dicts."""
        snapshot: dict[str, Any] = {}
        for metric in fields(self):
            value = getattr(self, metric.name)
            snapshot[metric.name] = dict(value) if isinstance(value, Counter) else value
        return snapshot
