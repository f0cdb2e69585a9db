"""
Unit tests for DependencyContainer
"""

import logging

import pytest

from burnbox.application.dependency_container import (
    DependencyContainer,
    DependencyNotFoundError,
)
from burnbox.application.event_publisher import EventPublisher
from burnbox.domain.events import BurnRetiredEvent
from tests.fixtures import BASE_TIME


class Service:
    pass


class TestDependencyContainer:
    def test_singleton_resolves_same_instance(self):
        container = DependencyContainer()
        instance = Service()
        container.register_singleton(Service, instance)

        assert container.resolve(Service) is instance
        assert container.resolve(Service) is instance

    def test_registered_names_are_sorted(self):
        container = DependencyContainer()
        container.register_singleton(Service, Service())
        container.register_singleton(EventPublisher, EventPublisher())

        assert container.registered_names() == ["EventPublisher", "Service"]

    def test_override_takes_precedence_until_cleared(self):
        container = DependencyContainer()
        original, replacement = Service(), Service()
        container.register_singleton(Service, original)

        container.override(Service, replacement)
        assert container.resolve(Service) is replacement

        container.clear_overrides()
        assert container.resolve(Service) is original

    def test_unregistered_raises(self):
        container = DependencyContainer()

        assert not container.is_registered(Service)
        with pytest.raises(DependencyNotFoundError):
            container.resolve(Service)

    def test_setup_event_handlers_logs_every_event(self, caplog):
        container = DependencyContainer()
        publisher = EventPublisher()
        container.setup_event_handlers(publisher)

        with caplog.at_level(logging.INFO, logger="burnbox"):
            publisher.publish(BurnRetiredEvent("burn-1", BASE_TIME, reason="manual", blob_deleted=True))

        assert "Burn retired: burn_id=burn-1" in caplog.text
