"""Event emitter capability used to observe a poller."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


Handler = Callable[..., Any]


@runtime_checkable
class Emitter(Protocol):
    """Protocol for subscribe/emit event delivery.

    The poller only calls ``emit``; ``on`` and ``once`` are used by
    consumers to subscribe.
    """

    def on(self, event: str, handler: Handler) -> None:
        """Subscribe a handler to every emission of an event."""
        ...

    def once(self, event: str, handler: Handler) -> None:
        """Subscribe a handler to the next emission of an event only."""
        ...

    def emit(self, event: str, *args: Any) -> bool:
        """Call the handlers of an event with the given arguments.

        Returns:
            True if the event had handlers.
        """
        ...


@dataclass
class _Subscription:
    handler: Handler
    once: bool


class EventEmitter:
    """In-process emitter.

    Handlers run synchronously in subscription order. ``once`` handlers
    are removed before they are called. Exceptions raised by a handler
    propagate to the emitting code.
    """

    def __init__(self) -> None:
        """Initialize an emitter with no subscriptions."""
        self._subscriptions: dict[str, list[_Subscription]] = {}

    def on(self, event: str, handler: Handler) -> None:
        """Subscribe a handler to every emission of an event.

        Args:
            event: Event name.
            handler: Callable invoked with the emitted arguments.
        """
        self._subscriptions.setdefault(event, []).append(_Subscription(handler, False))

    def once(self, event: str, handler: Handler) -> None:
        """Subscribe a handler to the next emission of an event.

        Args:
            event: Event name.
            handler: Callable invoked with the emitted arguments.
        """
        self._subscriptions.setdefault(event, []).append(_Subscription(handler, True))

    def off(self, event: str, handler: Handler) -> None:
        """Remove the first subscription of a handler, if any."""
        subscriptions = self._subscriptions.get(event, [])
        for index, subscription in enumerate(subscriptions):
            if subscription.handler == handler:
                del subscriptions[index]
                return

    def listener_count(self, event: str) -> int:
        """Get the number of handlers subscribed to an event."""
        return len(self._subscriptions.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """Call the handlers of an event.

        Args:
            event: Event name.
            *args: Arguments passed to each handler.

        Returns:
            True if the event had handlers.
        """
        subscriptions = self._subscriptions.get(event)
        if not subscriptions:
            return False

        snapshot = list(subscriptions)
        self._subscriptions[event] = [s for s in subscriptions if not s.once]

        for subscription in snapshot:
            subscription.handler(*args)
        return True
