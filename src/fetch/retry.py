"""Bounded, delay-free retry wrapper around a single logical fetch.

Retries are immediate. A not-ok response is retried while the budget
lasts; once it runs out the last response is returned as-is so the caller
sees the real outcome. Timed out attempts are replaced by a synthetic
not-ok response so they count against the same budget. Any other
transport error propagates without retrying.
"""

import asyncio
from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from src.fetch.constants import SYNTHETIC_RESPONSE_HEADER, SYNTHETIC_TIMEOUT_STATUS
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchOptions
from src.fetch.redact import redact_url_credentials
from src.fetch.response import is_ok, is_timeout_error
from src.fetch.transport import Transport, fetch_once


logger = structlog.get_logger()


class RetryBudget:
    """Remaining retry attempts for one retrying fetch.

    The counter never goes below zero.
    """

    def __init__(self, attempts: int) -> None:
        """Initialize the budget.

        Args:
            attempts: Number of retries allowed after the first attempt.

        Raises:
            ValueError: If attempts is negative.
        """
        if attempts < 0:
            msg = f"Retry budget must not be negative, got {attempts}"
            raise ValueError(msg)
        self._remaining = attempts

    @property
    def remaining(self) -> int:
        """Get the number of retries left."""
        return self._remaining

    @property
    def exhausted(self) -> bool:
        """Check if no retries are left."""
        return self._remaining == 0

    def consume(self) -> bool:
        """Take one retry from the budget.

        Returns:
            True if a retry was available and has been taken.
        """
        if self._remaining == 0:
            return False
        self._remaining -= 1
        return True

    def cancel(self) -> None:
        """Drop all remaining retries."""
        self._remaining = 0


@dataclass(frozen=True)
class PendingFetch:
    """An in-flight retrying fetch and the budget that bounds it.

    Awaiting it yields the final response.
    """

    task: "asyncio.Future[httpx.Response]"
    budget: RetryBudget

    def stop_retrying(self) -> None:
        """Prevent further retries; the attempt in progress still completes."""
        self.budget.cancel()

    def done(self) -> bool:
        """Check if the fetch has settled."""
        return self.task.done()

    def __await__(self) -> Generator[Any, None, httpx.Response]:
        return self.task.__await__()


def synthetic_timeout_response(url: str, method: str) -> httpx.Response:
    """Build the not-ok response that stands in for a timed out attempt.

    Args:
        url: Target URL of the attempt.
        method: HTTP method of the attempt.

    Returns:
        A 504 response marked with the synthetic response header.
    """
    return httpx.Response(
        SYNTHETIC_TIMEOUT_STATUS,
        headers={SYNTHETIC_RESPONSE_HEADER: "timeout"},
        request=httpx.Request(method, url),
    )


def is_synthetic_response(response: httpx.Response) -> bool:
    """Check if a response was substituted for a timed out attempt."""
    return SYNTHETIC_RESPONSE_HEADER in response.headers


async def fetch_with_retry(
    transport: Transport,
    url: str,
    options: FetchOptions,
    budget: RetryBudget,
) -> httpx.Response:
    """Run the retry loop until success or until the budget is spent.

    Args:
        transport: Transport capability.
        url: Target URL.
        options: Request options, without a retry count.
        budget: Retry budget shared with the caller for cancellation.

    Returns:
        The first ok response, or the last not-ok response.
    """
    metrics = FetchMetrics.get_instance()
    log = logger.bind(component="fetch", url=redact_url_credentials(url))
    attempt = 0

    while True:
        try:
            response = await fetch_once(transport, url, options)
        except Exception as e:
            if not is_timeout_error(e):
                raise
            metrics.record_timeout_substitution()
            log.info("timeout_substituted", attempt=attempt, error=str(e))
            response = synthetic_timeout_response(url, options.method)

        if is_ok(response) or not budget.consume():
            return response

        attempt += 1
        metrics.record_retry()
        log.debug(
            "retry_attempt",
            attempt=attempt,
            status_code=response.status_code,
            retries_left=budget.remaining,
        )


def eager_fetch(
    transport: Transport,
    url: str,
    options: FetchOptions,
) -> PendingFetch:
    """Start a retrying fetch bounded by ``options.retry`` extra attempts.

    Must be called with a running event loop.

    Args:
        transport: Transport capability.
        url: Target URL.
        options: Request options carrying the retry count.

    Returns:
        PendingFetch handle to await or cancel retries on.
    """
    budget = RetryBudget(options.retry)
    task = asyncio.ensure_future(
        fetch_with_retry(transport, url, options.without_retry(), budget)
    )
    return PendingFetch(task=task, budget=budget)
