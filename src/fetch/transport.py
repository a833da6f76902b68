"""Transport capability used by the poller to perform HTTP calls."""

from typing import Protocol, runtime_checkable

import httpx
import structlog

from src.fetch.errors import classify_exception
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchOptions
from src.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


@runtime_checkable
class Transport(Protocol):
    """Protocol for the "perform a fetch" capability.

    Implementations perform exactly one HTTP request and return a response
    whose body has already been read. Network failures are raised, not
    converted into responses.
    """

    async def __call__(self, url: str, options: FetchOptions) -> httpx.Response:
        """Perform one HTTP request.

        Args:
            url: Target URL.
            options: Request options.

        Returns:
            The HTTP response, any status.
        """
        ...


class HttpxTransport:
    """Default transport backed by ``httpx.AsyncClient``.

    Without an injected client, a short-lived client is opened per request.
    An injected client is reused and owned by the caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        follow_redirects: bool = True,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Shared client to reuse across requests.
            follow_redirects: Whether per-request clients follow redirects.
        """
        self._client = client
        self._follow_redirects = follow_redirects
        self._log = logger.bind(component="fetch")

    async def __call__(self, url: str, options: FetchOptions) -> httpx.Response:
        """Perform one HTTP request with httpx.

        Args:
            url: Target URL.
            options: Request options.

        Returns:
            The HTTP response with its body read.
        """
        self._log.debug(
            "http_request",
            url=redact_url_credentials(url),
            method=options.method,
            headers=redact_headers(options.headers),
        )
        kwargs = options.request_kwargs(url)

        if self._client is not None:
            return await self._client.request(**kwargs)

        async with httpx.AsyncClient(follow_redirects=self._follow_redirects) as client:
            return await client.request(**kwargs)


async def fetch_once(
    transport: Transport,
    url: str,
    options: FetchOptions,
) -> httpx.Response:
    """Perform a single transport call and record attempt metrics.

    Args:
        transport: Transport capability.
        url: Target URL.
        options: Request options.

    Returns:
        The HTTP response.
    """
    metrics = FetchMetrics.get_instance()
    metrics.record_attempt()
    try:
        response = await transport(url, options)
    except Exception as e:
        metrics.record_failure(classify_exception(e))
        raise
    metrics.record_response(response.status_code)
    return response
