"""Metrics collection for pollers."""

from dataclasses import dataclass, field
from typing import ClassVar

from src.fetch.models import FetchErrorClass
from src.poller.state_machine import PollerState


@dataclass
class PollerMetrics:
    """Metrics for poller fetch cycles.

    Singleton class shared by all pollers in the process.
    """

    poller_cycles_total: int = 0
    poller_ok_total: int = 0
    poller_data_total: int = 0
    poller_errors_total: dict[str, int] = field(default_factory=dict)
    poller_degraded_total: dict[str, int] = field(default_factory=dict)
    poller_handler_failures_total: int = 0
    poller_latency_ms_total: float = 0.0

    _instance: ClassVar["PollerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "PollerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_cycle(self) -> None:
        """Record a started fetch cycle."""
        self.poller_cycles_total += 1

    def record_ok(self, latency_ms: float) -> None:
        """Record an ok response.

        Args:
            latency_ms: Time from cycle start to response.
        """
        self.poller_ok_total += 1
        self.poller_latency_ms_total += latency_ms

    def record_data(self) -> None:
        """Record newly cached data."""
        self.poller_data_total += 1

    def record_error(self, error_class: FetchErrorClass, state: PollerState) -> None:
        """Record a failed cycle.

        Args:
            error_class: Classification of the failure.
            state: State the poller moved to.
        """
        key = error_class.value
        self.poller_errors_total[key] = self.poller_errors_total.get(key, 0) + 1
        self.poller_degraded_total[state.value] = (
            self.poller_degraded_total.get(state.value, 0) + 1
        )

    def record_handler_failure(self) -> None:
        """Record an event handler that raised."""
        self.poller_handler_failures_total += 1

    @property
    def avg_latency_ms(self) -> float:
        """Calculate average latency of ok responses.

        Returns:
            Average latency in milliseconds.
        """
        if self.poller_ok_total == 0:
            return 0.0
        return self.poller_latency_ms_total / self.poller_ok_total

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "poller_cycles_total": self.poller_cycles_total,
            "poller_ok_total": self.poller_ok_total,
            "poller_data_total": self.poller_data_total,
            "poller_errors_total": dict(self.poller_errors_total),
            "poller_degraded_total": dict(self.poller_degraded_total),
            "poller_handler_failures_total": self.poller_handler_failures_total,
            "poller_latency_ms_total": self.poller_latency_ms_total,
        }
