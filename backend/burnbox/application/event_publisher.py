"""
Event Publisher

Synchronous in-process dispatch of burn lifecycle events.
"""

import logging
from threading import Lock
from typing import Callable, Dict, List, Type

from burnbox.domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


def _handler_name(handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventPublisher:
    """
    Dispatches each event to the handlers subscribed to its class or any
    of its base classes, in subscription order.

    Handlers run on the publishing thread. A failing handler is logged and
    skipped; the lifecycle operation that published the event carries on.
    """

    def __init__(self):
        self._subscriptions: Dict[Type[DomainEvent], List[EventHandler]] = {}
        self._lock = Lock()

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Args:
            event_type: Event class; DomainEvent receives everything
            handler: Callable taking the event
        """
        with self._lock:
            self._subscriptions.setdefault(event_type, []).append(handler)
        logger.debug(f"{_handler_name(handler)} subscribed to {event_type.__name__}")

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            handlers = [
                handler
                for klass in type(event).__mro__
                for handler in self._subscriptions.get(klass, ())
            ]

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    f"Event handler {_handler_name(handler)} failed on "
                    f"{type(event).__name__} for burn {event.aggregate_id}"
                )
