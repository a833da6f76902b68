"""Tests for structured logging configuration."""

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog

from src.observability.logging import (
    NOISY_LOGGERS,
    bind_session_context,
    clear_session_context,
    configure_logging,
    parse_level,
)


@pytest.fixture(autouse=True)
def restore_structlog() -> Generator[None]:
    """Restore the default structlog configuration after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self) -> None:
        """Test that events are rendered as JSON lines."""
        output = io.StringIO()
        configure_logging(output=output)

        structlog.get_logger().info("poller_started", refresh_interval_ms=1000)

        record = json.loads(output.getvalue().strip())
        assert record["event"] == "poller_started"
        assert record["level"] == "info"
        assert record["refresh_interval_ms"] == 1000
        assert "timestamp" in record

    def test_level_filtering(self) -> None:
        """Test that events below the level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output)

        log = structlog.get_logger()
        log.info("fetch_ok")
        log.warning("poller_data_stale")

        lines = output.getvalue().strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["event"] == "poller_data_stale"

    def test_console_output(self) -> None:
        """Test the human readable renderer."""
        output = io.StringIO()
        configure_logging(output=output, json_format=False)

        structlog.get_logger().warning("poller_data_stale", error_class="HTTP_5XX")

        text = output.getvalue()
        assert "poller_data_stale" in text
        assert "HTTP_5XX" in text

    def test_level_name(self) -> None:
        """Test that a level can be given by name."""
        output = io.StringIO()
        configure_logging(level="warning", output=output)

        structlog.get_logger().info("fetch_ok")

        assert output.getvalue() == ""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (logging.INFO, logging.WARNING),
            (logging.DEBUG, logging.WARNING),
            (logging.ERROR, logging.ERROR),
        ],
    )
    def test_http_client_logs_capped(self, level: int, expected: int) -> None:
        """Test that per-request httpx logging stays quiet."""
        configure_logging(level=level, output=io.StringIO())

        assert logging.getLogger("httpx").level == expected

    def test_session_context(self) -> None:
        """Test that the session id is attached to every event."""
        output = io.StringIO()
        configure_logging(output=output)
        bind_session_context("session-1")

        structlog.get_logger().info("poller_started")
        clear_session_context()
        structlog.get_logger().info("poller_stopped")

        first, second = (
            json.loads(line) for line in output.getvalue().strip().splitlines()
        )
        assert first["session_id"] == "session-1"
        assert "session_id" not in second


class TestParseLevel:
    """Tests for parse_level."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            (" Warning ", logging.WARNING),
        ],
    )
    def test_known(self, name: str, expected: int) -> None:
        """Test case-insensitive level names."""
        assert parse_level(name) == expected

    def test_unknown(self) -> None:
        """Test that unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_level("loud")
