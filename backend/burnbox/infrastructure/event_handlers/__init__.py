"""
Infrastructure event handlers subscribed to the application's EventPublisher.
"""

from .logging_handler import LoggingEventHandler

__all__ = ["LoggingEventHandler"]
