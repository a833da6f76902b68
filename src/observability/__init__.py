"""Structured logging for the poller CLI."""

from src.observability.logging import (
    bind_session_context,
    clear_session_context,
    configure_logging,
    parse_level,
)


__all__ = [
    "configure_logging",
    "parse_level",
    "bind_session_context",
    "clear_session_context",
]
