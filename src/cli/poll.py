"""CLI commands for polling an HTTP resource."""

import asyncio
import json
import sys
import uuid
from dataclasses import dataclass
from typing import Any

import click
import structlog

from src.observability.logging import bind_session_context, configure_logging
from src.poller import (
    EVENT_DATA,
    EVENT_ERROR,
    Poller,
    PollerConfig,
    PollerConfigError,
    PollerState,
)
from src.settings import PollerSettings, get_settings


logger = structlog.get_logger()


@dataclass
class RequestArgs:
    """Request options collected from the command line."""

    url: str
    method: str
    headers: tuple[str, ...]
    timeout_seconds: float | None
    retry: int | None
    interval_ms: int | None


def parse_header(value: str) -> tuple[str, str]:
    """Split a ``Name: value`` header argument.

    Args:
        value: Raw command line value.

    Returns:
        Header name and value.

    Raises:
        click.BadParameter: If the value has no colon or an empty name.
    """
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        msg = f"Expected 'Name: value', got '{value}'"
        raise click.BadParameter(msg, param_hint="--header")
    return name.strip(), header_value.strip()


def build_config(args: RequestArgs, settings: PollerSettings) -> PollerConfig:
    """Build a poller configuration from arguments and settings.

    Command line values take precedence over ``POLLER_*`` settings.

    Args:
        args: Parsed command line arguments.
        settings: Environment defaults.

    Returns:
        Validated PollerConfig.

    Raises:
        PollerConfigError: If the resulting configuration is invalid.
    """
    headers = dict(parse_header(h) for h in args.headers)
    return PollerConfig.from_mapping(
        {
            "url": args.url,
            "refresh_interval_ms": args.interval_ms or settings.refresh_interval_ms,
            "options": {
                "method": args.method,
                "headers": headers,
                "timeout_seconds": args.timeout_seconds or settings.timeout_seconds,
                "retry": settings.retry if args.retry is None else args.retry,
            },
        }
    )


def format_data(data: Any) -> str:
    """Render cached data for stdout: text as-is, anything else as JSON."""
    if isinstance(data, str):
        return data
    return json.dumps(data, default=str, sort_keys=True)


def _setup_logging(
    settings: PollerSettings,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    use_json = settings.json_logs if json_logs is None else json_logs
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=use_json,
    )
    bind_session_context(str(uuid.uuid4()))


def _load_config(args: RequestArgs, settings: PollerSettings) -> PollerConfig:
    try:
        return build_config(args, settings)
    except PollerConfigError as e:
        logger.warning("config_invalid", errors=e.errors)
        click.echo("Configuration validation failed:", err=True)
        for error in e.errors:
            click.echo(f"  - {error['loc']}: {error['msg']}", err=True)
        sys.exit(2)


async def _run_poll(config: PollerConfig, count: int) -> None:
    poller = Poller(config)
    finished = asyncio.Event()
    settled = 0

    def on_settled() -> None:
        nonlocal settled
        settled += 1
        if count and settled >= count:
            finished.set()

    def on_data(data: Any) -> None:
        click.echo(format_data(data))
        on_settled()

    def on_error(error: BaseException) -> None:
        click.echo(f"Error: {error}", err=True)
        on_settled()

    poller.on(EVENT_DATA, on_data)
    poller.on(EVENT_ERROR, on_error)
    poller.start(initial_request=True)
    try:
        await finished.wait()
    finally:
        await poller.aclose()


async def _run_fetch(config: PollerConfig) -> int:
    poller = Poller(config)
    await poller.fetch()

    if poller.state == PollerState.FRESH:
        click.echo(format_data(poller.get_data()))
        return 0

    click.echo(f"Error: {poller.last_error}", err=True)
    return 1


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """HTTP poller CLI."""


@cli.command()
@click.argument("url")
@click.option(
    "--interval-ms",
    type=click.IntRange(min=1),
    default=None,
    help="Refresh interval in milliseconds (default: POLLER_REFRESH_INTERVAL_MS).",
)
@click.option(
    "--retry",
    type=click.IntRange(min=0),
    default=None,
    help="Extra attempts after a not-ok response (default: POLLER_RETRY).",
)
@click.option("--method", default="GET", show_default=True, help="HTTP method.")
@click.option(
    "--header",
    "headers",
    multiple=True,
    help="Request header as 'Name: value'. Repeatable.",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=float,
    default=None,
    help="Per-request timeout in seconds (default: POLLER_TIMEOUT_SECONDS).",
)
@click.option(
    "--count",
    type=click.IntRange(min=0),
    default=0,
    help="Stop after this many fetch cycles have settled (default: run forever).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: POLLER_JSON_LOGS).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def poll(  # noqa: PLR0913
    url: str,
    interval_ms: int | None,
    retry: int | None,
    method: str,
    headers: tuple[str, ...],
    timeout_seconds: float | None,
    count: int,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Poll URL on a schedule, printing each new value."""
    settings = get_settings()
    _setup_logging(settings, json_logs, verbose)
    args = RequestArgs(
        url=url,
        method=method,
        headers=headers,
        timeout_seconds=timeout_seconds,
        retry=retry,
        interval_ms=interval_ms,
    )
    config = _load_config(args, settings)

    try:
        asyncio.run(_run_poll(config, count))
    except KeyboardInterrupt:
        logger.info("poll_interrupted")


@cli.command()
@click.argument("url")
@click.option(
    "--retry",
    type=click.IntRange(min=0),
    default=None,
    help="Extra attempts after a not-ok response (default: POLLER_RETRY).",
)
@click.option("--method", default="GET", show_default=True, help="HTTP method.")
@click.option(
    "--header",
    "headers",
    multiple=True,
    help="Request header as 'Name: value'. Repeatable.",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=float,
    default=None,
    help="Per-request timeout in seconds (default: POLLER_TIMEOUT_SECONDS).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: POLLER_JSON_LOGS).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def fetch(  # noqa: PLR0913
    url: str,
    retry: int | None,
    method: str,
    headers: tuple[str, ...],
    timeout_seconds: float | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Run a single fetch cycle against URL and print the result."""
    settings = get_settings()
    _setup_logging(settings, json_logs, verbose)
    args = RequestArgs(
        url=url,
        method=method,
        headers=headers,
        timeout_seconds=timeout_seconds,
        retry=retry,
        interval_ms=None,
    )
    config = _load_config(args, settings)

    exit_code = asyncio.run(_run_fetch(config))
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    cli()
