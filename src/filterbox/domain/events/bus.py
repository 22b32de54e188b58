"""Synchronous publish/subscribe bus used by the filter engine.

Handlers MUST be synchronous. The engine publishes from inside its
command handlers, so a handler that needs async work should schedule it
with ``asyncio.create_task()`` instead of awaiting it.
"""

import inspect
from typing import Callable, Type, TypeVar

from filterbox.logger import get_logger

from .types import Event

logger = get_logger("events.bus")

T = TypeVar("T", bound=Event)

EventHandler = Callable[[Event], None]


class EventBus:
    """Routes published events to the handlers registered for their exact type.

    Example:
        ```python
        bus = EventBus()
        bus.subscribe(ExpressionsChanged, lambda event: save(event.expressions))
        bus.publish(ExpressionsChanged(expressions=[...]))
        ```

    Not thread-safe; all calls are expected on the event loop thread.
    """

    def __init__(self, raise_errors: bool = False):
        """
        Initialize the event bus.

        Args:
            raise_errors: Re-raise handler exceptions after logging them instead
                of continuing with the remaining handlers.
        """
        self._handlers: dict[Type[Event], list[Callable[[Event], None]]] = {}
        """Registry of event handlers by event type."""
        self._raise_errors = raise_errors

    def subscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """
        Register ``handler`` for events of ``event_type``.

        Subscribing the same handler twice is a no-op.

        Raises:
            TypeError: If handler is a coroutine function
        """
        if inspect.iscoroutinefunction(handler):
            raise TypeError(
                f"Event handlers must be synchronous functions. "
                f"Handler {getattr(handler, '__name__', handler)!r} is a coroutine function; "
                f"schedule async work with asyncio.create_task() instead."
            )

        handlers = self._handlers.setdefault(event_type, [])
        if handler in handlers:
            logger.debug(f"Handler already subscribed for {event_type.__name__}, skipping")
            return
        handlers.append(handler)
        logger.debug(f"Subscribed handler for {event_type.__name__}")

    def unsubscribe(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Remove ``handler``. Unknown handlers are ignored."""
        try:
            self._handlers.get(event_type, []).remove(handler)
            logger.debug(f"Unsubscribed handler for {event_type.__name__}")
        except ValueError:
            logger.debug(f"Handler not found in subscriptions for {event_type.__name__}")

    def publish(self, event: Event) -> None:
        """
        Call every handler subscribed to ``type(event)`` in subscription order.

        A failing handler is logged and does not prevent the others from
        running, unless the bus was created with ``raise_errors=True``.
        """
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logger.debug(f"No handlers subscribed for {event_type.__name__}")
            return

        logger.debug(f"Publishing {event_type.__name__} to {len(handlers)} handler(s)")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.opt(exception=e).error(f"Error in event handler for {event_type.__name__}: {e}")
                if self._raise_errors:
                    raise

    def clear(self) -> None:
        """Drop all subscriptions."""
        self._handlers.clear()
        logger.debug("Event bus cleared")

    def has_subscribers(self, event_type: Type[Event]) -> bool:
        return bool(self._handlers.get(event_type))
