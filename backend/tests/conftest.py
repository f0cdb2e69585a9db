"""
Shared pytest fixtures and configuration for the BurnBox backend test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory repositories and a controllable clock
- A fully wired BurnLifecycleService for unit tests
"""

import os

import pytest
import redis
from unittest.mock import Mock

# Hypothesis configuration
from hypothesis import settings, HealthCheck, Phase

from burnbox.application.burn_service import BurnLifecycleService
from burnbox.application.event_publisher import EventPublisher
from burnbox.domain.audit.services import AuditLog
from burnbox.domain.burn_records.credentials import CredentialGuard
from burnbox.domain.burn_records.value_objects import CallerIdentity, RequesterInfo
from burnbox.domain.events import DomainEvent
from burnbox.domain.quota.value_objects import Tier
from burnbox.infrastructure.redis_repository import RedisRepository
from tests.fixtures import (
    BASE_TIME,
    FakeBlobStorage,
    FrozenClock,
    InMemoryAttemptRepository,
    InMemoryBurnRepository,
)

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


# =============================================================================
# Infrastructure Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """Provide a frozen clock at a fixed UTC time."""
    return FrozenClock()


@pytest.fixture
def burn_repository():
    return InMemoryBurnRepository()


@pytest.fixture
def attempt_repository():
    return InMemoryAttemptRepository()


@pytest.fixture
def blob_storage():
    return FakeBlobStorage()


@pytest.fixture
def redis_client():
    """
    Yields a clean Redis client for integration and contract tests.
    Connects to REDIS_HOST:REDIS_PORT and uses a dedicated test database.
    """
    # Use environment variables or local defaults
    host = os.getenv("REDIS_HOST", "localhost")
    port = int(os.getenv("REDIS_PORT", 6379))
    db = int(os.getenv("REDIS_TEST_DB", 15))

    client = redis.Redis(host=host, port=port, db=db, decode_responses=False, socket_connect_timeout=1)

    try:
        client.ping()
    except redis.ConnectionError:
        pytest.skip("Redis service not available. Skipping integration tests.")

    # Clean before test
    client.flushdb()

    yield client

    # Clean after test
    client.flushdb()
    client.close()


@pytest.fixture
def redis_repo(redis_client):
    return RedisRepository(redis_client, key_prefix="burnbox-test")


@pytest.fixture
def published_events():
    """List that collects every event published during a test."""
    return []


@pytest.fixture
def event_publisher(published_events):
    publisher = EventPublisher()
    publisher.subscribe(DomainEvent, published_events.append)
    return publisher


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def burn_service(burn_repository, attempt_repository, blob_storage, event_publisher, clock):
    """
    Provide a BurnLifecycleService wired to in-memory collaborators.

    Password hashing uses few iterations and handle retries do not sleep.
    """
    return BurnLifecycleService(
        burn_repository=burn_repository,
        blob_storage=blob_storage,
        audit_log=AuditLog(attempt_repository),
        event_publisher=event_publisher,
        credentials=CredentialGuard(iterations=1000),
        public_base_url="https://burn.test",
        handle_retry_backoff=0,
        clock=clock,
    )


@pytest.fixture
def owner():
    """Authenticated free-tier caller."""
    return CallerIdentity(owner_id="user-1", tier=Tier.FREE)


@pytest.fixture
def pro_owner():
    return CallerIdentity(owner_id="user-pro", tier=Tier.PRO)


@pytest.fixture
def requester():
    return RequesterInfo(ip="203.0.113.7", user_agent="pytest", email="bob@example.com")


@pytest.fixture
def mock_burn_service():
    """
    Provide a mock BurnLifecycleService for API tests.

    Returns a Mock object with the service's public attributes preset.
    """
    mock = Mock(spec=BurnLifecycleService)
    mock.transfer_ttl_seconds = 3600
    mock.now.return_value = BASE_TIME
    mock.share_url_for.side_effect = lambda record: f"https://burn.test/d/{record.short_code}"
    return mock


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "contract: Contract tests (verify interface compliance)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/contracts/* -> @pytest.mark.contract
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        # Get the test file path relative to tests directory
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/contracts/" in test_path or "\\contracts\\" in test_path:
            item.add_marker(pytest.mark.contract)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
