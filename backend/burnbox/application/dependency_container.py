"""
Dependency Container

Holds the single shared instance of every adapter and service built by the
application factory. API handlers and Celery tasks resolve from here rather
than constructing their own collaborators.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Registry of shared instances keyed by interface type.

    Tests can swap an instance with ``override`` without touching the
    registrations made by the factory.
    """

    def __init__(self):
        self._instances: Dict[Type, Any] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register the instance returned for ``interface``.

        Args:
            interface: Abstract repository or concrete service type
            implementation: Instance shared by every caller
        """
        with self._lock:
            self._instances[interface] = implementation
        logger.debug(f"Registered {interface.__name__} -> {type(implementation).__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Return the instance for ``interface``, preferring an override.

        Raises:
            DependencyNotFoundError: If nothing is registered for the type
        """
        with self._lock:
            if interface in self._overrides:
                return self._overrides[interface]
            try:
                return self._instances[interface]
            except KeyError:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                ) from None

    def override(self, interface: Type[T], implementation: T) -> None:
        with self._lock:
            self._overrides[interface] = implementation
        logger.debug(f"Overridden: {interface.__name__}")

    def clear_overrides(self) -> None:
        with self._lock:
            self._overrides.clear()

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return interface in self._instances or interface in self._overrides

    def registered_names(self) -> List[str]:
        """Names of the registered types, for startup logging."""
        with self._lock:
            return sorted(interface.__name__ for interface in self._instances)

    def setup_event_handlers(self, event_publisher, burn_logger: Optional[logging.Logger] = None) -> None:
        """
        Subscribe the logging handler to every domain event.

        Args:
            event_publisher: EventPublisher used by the lifecycle service
            burn_logger: Logger for event lines, defaults to "burnbox"
        """
        from burnbox.domain.events import DomainEvent
        from burnbox.infrastructure.event_handlers.logging_handler import LoggingEventHandler

        handler = LoggingEventHandler(burn_logger or logging.getLogger("burnbox"))
        event_publisher.subscribe(DomainEvent, handler.handle)
