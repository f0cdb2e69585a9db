"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .burn_service import BurnLifecycleService
from .dependency_container import DependencyContainer
from .event_publisher import EventPublisher

__all__ = [
    'BurnLifecycleService',
    'DependencyContainer',
    'EventPublisher',
]
