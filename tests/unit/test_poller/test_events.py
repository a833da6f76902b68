"""Unit tests for the in-process event emitter."""

from typing import Any

import pytest

from src.poller.events import Emitter, EventEmitter


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_satisfies_protocol(self) -> None:
        """Test that EventEmitter is an Emitter."""
        assert isinstance(EventEmitter(), Emitter)

    def test_emit_without_handlers(self) -> None:
        """Test that emitting an unheard event returns False."""
        assert EventEmitter().emit("data", 1) is False

    def test_on_receives_every_emission(self) -> None:
        """Test that on handlers are called with the emitted arguments."""
        emitter = EventEmitter()
        received: list[tuple[Any, ...]] = []
        emitter.on("ok", lambda *args: received.append(args))

        assert emitter.emit("ok", "response", 12.5) is True
        emitter.emit("ok", "again", 3.0)

        assert received == [("response", 12.5), ("again", 3.0)]

    def test_once_receives_next_emission_only(self) -> None:
        """Test that once handlers are removed after one call."""
        emitter = EventEmitter()
        received: list[Any] = []
        emitter.once("data", received.append)

        emitter.emit("data", 1)
        emitter.emit("data", 2)

        assert received == [1]
        assert emitter.listener_count("data") == 0

    def test_handlers_run_in_subscription_order(self) -> None:
        """Test handler ordering."""
        emitter = EventEmitter()
        order: list[str] = []
        emitter.on("data", lambda _: order.append("first"))
        emitter.once("data", lambda _: order.append("second"))
        emitter.on("data", lambda _: order.append("third"))

        emitter.emit("data", None)

        assert order == ["first", "second", "third"]
        assert emitter.listener_count("data") == 2

    def test_off(self) -> None:
        """Test removing a handler."""
        emitter = EventEmitter()
        received: list[Any] = []
        emitter.on("data", received.append)

        emitter.off("data", received.append)
        emitter.off("missing", received.append)

        assert emitter.emit("data", 1) is False
        assert received == []

    def test_off_bound_method(self) -> None:
        """Test that off matches a bound method looked up again."""

        class Sink:
            def __init__(self) -> None:
                self.items: list[Any] = []

            def push(self, item: Any) -> None:
                self.items.append(item)

        emitter = EventEmitter()
        sink = Sink()
        emitter.on("data", sink.push)
        emitter.on("data", sink.push)

        emitter.off("data", sink.push)

        assert emitter.listener_count("data") == 1
        emitter.emit("data", 1)
        assert sink.items == [1]

    def test_handler_exception_propagates(self) -> None:
        """Test that a raising handler surfaces to the emitter caller."""
        emitter = EventEmitter()

        def boom(_: Any) -> None:
            raise RuntimeError("handler failed")

        emitter.on("error", boom)

        with pytest.raises(RuntimeError, match="handler failed"):
            emitter.emit("error", ValueError("x"))
