"""Poller: a remote HTTP resource kept as a locally readable value."""

import asyncio
import inspect
import time
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from src.fetch.errors import HttpError, classify_exception
from src.fetch.models import FetchErrorClass, FetchOptions
from src.fetch.redact import redact_url_credentials
from src.fetch.response import decode_body, is_ok
from src.fetch.retry import PendingFetch, eager_fetch
from src.fetch.transport import HttpxTransport, Transport, fetch_once
from src.poller.config import PollerConfig
from src.poller.constants import (
    COMPONENT_POLLER,
    EVENT_CODE_DATA_DEFAULT,
    EVENT_CODE_DATA_STALE,
    EVENT_DATA,
    EVENT_ERROR,
    EVENT_OK,
)
from src.poller.errors import PollerAlreadyRunningError
from src.poller.events import Emitter, EventEmitter, Handler
from src.poller.metrics import PollerMetrics
from src.poller.scheduler import RepeatingTimer
from src.poller.state_machine import PollerState, PollerStateMachine


logger = structlog.get_logger()

STALE_DATA_MESSAGE = "Poller is serving stale data. It was unable to fetch fresh data"
DEFAULT_DATA_MESSAGE = "Poller is serving default data. It was unable to fetch fresh data"


class Poller:
    """Periodically fetches a URL and caches the latest parsed value.

    Every fetch cycle ends in exactly one of two ways:
    - success: ``'ok'`` (response, latency_ms) is emitted, the body is
      decoded and parsed, the result is cached, the state becomes FRESH
      and ``'data'`` (data) is emitted
    - failure: the state becomes STALE (or ERRORING if nothing was ever
      fetched), a warning/error is logged and ``'error'`` (error) is
      emitted; the cached data is left untouched

    Cycles never raise. Overlapping cycles are not serialized; the one
    that settles last determines the final state and data.
    """

    def __init__(
        self,
        config: PollerConfig | Mapping[str, Any],
        *,
        transport: Transport | None = None,
        emitter: Emitter | None = None,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the poller.

        Args:
            config: Poller configuration, or a mapping of its fields.
            transport: Capability performing HTTP requests (httpx by default).
            emitter: Event emitter receiving lifecycle events.
            log: Structured logger for degraded-state reports.

        Raises:
            PollerConfigError: If a mapping fails validation.
        """
        if not isinstance(config, PollerConfig):
            config = PollerConfig.from_mapping(config)

        self._config = config
        self._transport: Transport = transport or HttpxTransport()
        self._emitter: Emitter = emitter or EventEmitter()
        self._log = (log or logger).bind(
            component=COMPONENT_POLLER,
            url=redact_url_credentials(config.url),
        )
        self._metrics = PollerMetrics.get_instance()
        self._state_machine = PollerStateMachine(redact_url_credentials(config.url))
        self._data: Any = config.default_data
        self._last_error: BaseException | None = None
        self._timer: RepeatingTimer | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._pending_retries: set[PendingFetch] = set()

        if config.autostart:
            self.start(initial_request=True)

    @property
    def config(self) -> PollerConfig:
        """Get the poller configuration."""
        return self._config

    @property
    def url(self) -> str:
        """Get the polled URL."""
        return self._config.url

    @property
    def options(self) -> FetchOptions:
        """Get the request options, with derived defaults applied."""
        return self._config.options

    @property
    def state(self) -> PollerState:
        """Get the freshness state of the cached data."""
        return self._state_machine.state

    @property
    def last_error(self) -> BaseException | None:
        """Get the error of the latest failed cycle, cleared on success."""
        return self._last_error

    @property
    def emitter(self) -> Emitter:
        """Get the event emitter."""
        return self._emitter

    @property
    def in_flight(self) -> int:
        """Get the number of fetch cycles currently running."""
        return len(self._in_flight)

    @property
    def next_fetch_due(self) -> float | None:
        """Get the event loop time of the next scheduled cycle, if running."""
        return self._timer.next_due if self._timer is not None else None

    def on(self, event: str, handler: Handler) -> None:
        """Subscribe to every emission of a poller event."""
        self._emitter.on(event, handler)

    def once(self, event: str, handler: Handler) -> None:
        """Subscribe to the next emission of a poller event."""
        self._emitter.once(event, handler)

    def get_data(self) -> Any:
        """Get the cached data without fetching."""
        return self._data

    def is_running(self) -> bool:
        """Check if scheduled polling is active."""
        return self._timer is not None and self._timer.active

    def start(self, initial_request: bool = False) -> "asyncio.Future[None]":
        """Start scheduled polling.

        Must be called with a running event loop.

        Args:
            initial_request: Run one fetch cycle immediately.

        Returns:
            Future resolving when the initial cycle has settled, or an
            already-resolved future without an initial request.

        Raises:
            PollerAlreadyRunningError: If polling is already active.
        """
        if self.is_running():
            raise PollerAlreadyRunningError(self._config.url)

        loop = asyncio.get_running_loop()
        if initial_request:
            pending: asyncio.Future[None] = self._spawn_fetch()
        else:
            pending = loop.create_future()
            pending.set_result(None)

        self._install_timer()
        self._log.info(
            "poller_started",
            refresh_interval_ms=self._config.refresh_interval_ms,
            initial_request=initial_request,
        )
        return pending

    def stop(self) -> bool:
        """Stop scheduled polling.

        Cycles already in flight run to completion. The state is not changed.

        Returns:
            Always True.
        """
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._log.info("poller_stopped")
        return True

    def retry(self) -> "asyncio.Task[None]":
        """Fetch now and restart the schedule from this moment.

        The next scheduled tick happens one refresh interval after this
        call. Starts the schedule if it was not running.

        Returns:
            Task of the immediate fetch cycle.

        Raises:
            RuntimeError: If no event loop is running.
        """
        asyncio.get_running_loop()
        task = self._spawn_fetch()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._install_timer()
        self._log.info("poller_retry")
        return task

    def stop_retrying(self) -> None:
        """Cancel the remaining retries of every retrying fetch in flight."""
        for pending in list(self._pending_retries):
            pending.stop_retrying()

    async def aclose(self) -> None:
        """Stop polling and wait for in-flight cycles to settle."""
        self.stop()
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    async def fetch(self) -> None:
        """Run one fetch cycle.

        Never raises; failures are reported through the ``'error'``
        event and the state.
        """
        started = time.perf_counter()
        self._metrics.record_cycle()
        options = self._config.options

        try:
            response = await self._perform(options)
            if not is_ok(response):
                raise HttpError(
                    url=self._config.url,
                    method=options.method,
                    response=response,
                )

            latency_ms = (time.perf_counter() - started) * 1000
            self._on_ok(response, latency_ms)
            body = decode_body(response)
        except Exception as e:  # noqa: BLE001
            self._on_failure(e, classify_exception(e))
            return

        try:
            data = self._config.parse_data(body)
            if inspect.isawaitable(data):
                data = await data
        except Exception as e:  # noqa: BLE001
            self._on_failure(e, FetchErrorClass.PARSE_ERROR)
            return

        self._on_data(data)

    async def _perform(self, options: FetchOptions) -> httpx.Response:
        if not options.wants_retry:
            return await fetch_once(self._transport, self._config.url, options)

        pending = eager_fetch(self._transport, self._config.url, options)
        self._pending_retries.add(pending)
        try:
            return await pending
        except asyncio.CancelledError:
            pending.stop_retrying()
            pending.task.cancel()
            raise
        finally:
            self._pending_retries.discard(pending)

    def _on_ok(self, response: httpx.Response, latency_ms: float) -> None:
        self._last_error = None
        self._metrics.record_ok(latency_ms)
        self._log.debug(
            "fetch_ok",
            status_code=response.status_code,
            latency_ms=round(latency_ms, 2),
        )
        self._emit(EVENT_OK, response, latency_ms)

    def _on_data(self, data: Any) -> None:
        self._data = data
        self._state_machine.succeed()
        self._metrics.record_data()
        self._emit(EVENT_DATA, data)

    def _on_failure(self, error: Exception, error_class: FetchErrorClass) -> None:
        state = self._state_machine.fail()
        self._last_error = error
        self._metrics.record_error(error_class, state)

        if state == PollerState.STALE:
            self._log.warning(
                "poller_data_stale",
                event_code=EVENT_CODE_DATA_STALE,
                message=STALE_DATA_MESSAGE,
                error_class=error_class.value,
                error=error,
            )
        else:
            self._log.error(
                "poller_data_default",
                event_code=EVENT_CODE_DATA_DEFAULT,
                message=DEFAULT_DATA_MESSAGE,
                error_class=error_class.value,
                error=error,
            )

        self._emit(EVENT_ERROR, error)

    def _emit(self, event: str, *args: Any) -> None:
        try:
            self._emitter.emit(event, *args)
        except Exception:
            self._metrics.record_handler_failure()
            self._log.exception("event_handler_failed", event_name=event)

    def _spawn_fetch(self) -> "asyncio.Task[None]":
        task = asyncio.ensure_future(self.fetch())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def _install_timer(self) -> None:
        self._timer = RepeatingTimer(
            self._config.refresh_interval_seconds,
            self._spawn_fetch,
        )
        self._timer.start()
