"""Repeating timer that drives scheduled fetch cycles."""

import asyncio
from collections.abc import Callable

import structlog


logger = structlog.get_logger()


class RepeatingTimer:
    """Calls a function at a fixed interval on the running event loop.

    Ticks are fixed-rate: each tick is scheduled one interval after the
    previous tick's due time, not after the callback finished. The
    callback must not block; it typically spawns a task.
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], object],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the timer.

        Args:
            interval_seconds: Delay between ticks.
            callback: Function invoked on every tick.
            loop: Event loop to schedule on; the running loop by default.

        Raises:
            ValueError: If the interval is not positive.
        """
        if interval_seconds <= 0:
            msg = f"Timer interval must be positive, got {interval_seconds}"
            raise ValueError(msg)
        self._interval = interval_seconds
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._due: float | None = None
        self._ticks = 0

    @property
    def interval_seconds(self) -> float:
        """Get the tick interval."""
        return self._interval

    @property
    def active(self) -> bool:
        """Check if a tick is scheduled."""
        return self._handle is not None

    @property
    def next_due(self) -> float | None:
        """Get the loop time of the next tick, or None when inactive."""
        return self._due if self._handle is not None else None

    @property
    def ticks(self) -> int:
        """Get the number of ticks fired since creation."""
        return self._ticks

    def start(self) -> None:
        """Schedule the first tick one interval from now.

        Raises:
            RuntimeError: If the timer is already active or no loop is running.
        """
        if self._handle is not None:
            msg = "Timer is already active"
            raise RuntimeError(msg)
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._schedule(self._loop.time() + self._interval)

    def cancel(self) -> None:
        """Cancel the next tick. Safe to call when inactive."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._due = None

    def _schedule(self, due: float) -> None:
        if self._loop is None:
            return
        self._due = due
        self._handle = self._loop.call_at(due, self._tick)

    def _tick(self) -> None:
        if self._due is None:
            return
        self._ticks += 1
        # Reschedule first so a raising callback does not stop the timer
        self._schedule(self._due + self._interval)
        try:
            self._callback()
        except Exception:
            logger.exception("timer_callback_failed", tick=self._ticks)
