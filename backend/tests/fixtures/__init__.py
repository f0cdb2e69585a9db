"""
Test fixtures package.

Provides factory functions and in-memory repository implementations for testing.
"""

from .domain_fixtures import BASE_TIME, FrozenClock, create_burn_record
from .mock_repositories import (
    FakeBlobStorage,
    InMemoryAttemptRepository,
    InMemoryBurnRepository,
)

__all__ = [
    "BASE_TIME",
    "FrozenClock",
    "create_burn_record",
    "FakeBlobStorage",
    "InMemoryAttemptRepository",
    "InMemoryBurnRepository",
]
