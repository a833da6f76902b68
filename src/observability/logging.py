"""structlog setup for the poller CLI."""

import logging
import sys
from typing import TextIO

import structlog


# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def parse_level(name: str) -> int:
    """Translate a level name such as ``"debug"`` into a logging level.

    Raises:
        ValueError: If the name is not a known level.
    """
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {name}"
        raise ValueError(msg)
    return level


def _renderer(json_format: bool, output: TextIO) -> structlog.types.Processor:
    if json_format:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=output.isatty())


def configure_logging(
    level: int | str = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Route poller events and stdlib logging to one stream.

    Poller events carry ``component`` and ``url`` from the bound logger
    and ``session_id`` from context variables. Request logs of the HTTP
    client are capped at WARNING unless ``level`` is more verbose.

    Args:
        level: Minimum level, as a number or a name like ``"debug"``.
        output: Stream receiving the rendered events (default: stderr).
        json_format: Render JSON lines instead of console output.
    """
    if isinstance(level, str):
        level = parse_level(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(json_format, output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_session_context(session_id: str) -> None:
    """Attach a CLI session identifier to every subsequent event."""
    structlog.contextvars.bind_contextvars(session_id=session_id)


def clear_session_context() -> None:
    """Remove the session identifier bound by bind_session_context."""
    structlog.contextvars.unbind_contextvars("session_id")
