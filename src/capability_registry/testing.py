"""Testing utilities for capability providers.

This module provides shared contract tests that provider packages can reuse
to check their ServiceFactory implementations behave the way the Registry
expects.
"""

import pytest

from capability_registry.protocols import ServiceFactory
from capability_registry.registry import Registry


class ServiceFactoryContractTests[T]:
    """Abstract contract tests that all ServiceFactory implementations must pass.

    Required Fixtures:
        factory: ServiceFactory instance to test, configured so it can create

    Contract Requirements:
        1. can_create() must return a bool
        2. create() must return a non-None instance when can_create() is True
        3. create() must build a fresh instance per call (the Registry owns caching)
        4. The factory must work as a singleton provider in a Registry

    Usage Pattern:
        class TestMailerFactory(ServiceFactoryContractTests[Mailer]):
            @pytest.fixture
            def factory(self) -> ServiceFactory[Mailer]:
                return MailerFactory(MailerConfiguration(host="localhost"))

            # All contract tests run automatically

    """

    @pytest.fixture
    def factory(self) -> ServiceFactory[T]:
        """Provide ServiceFactory instance to test.

        Subclasses MUST override this fixture.

        Raises:
            NotImplementedError: If subclass doesn't override this fixture

        """
        raise NotImplementedError(
            "Subclass must provide 'factory' fixture with ServiceFactory instance"
        )

    def test_can_create_returns_bool(self, factory: ServiceFactory[T]) -> None:
        """Verify can_create() reports availability as a bool."""
        assert isinstance(factory.can_create(), bool), (
            "can_create() must return a bool"
        )

    def test_create_returns_instance_when_available(
        self, factory: ServiceFactory[T]
    ) -> None:
        """Verify create() returns an instance whenever can_create() is True."""
        if not factory.can_create():
            pytest.fail("Contract fixture factory must be able to create")
        assert factory.create() is not None, (
            "create() must return an instance when can_create() is True"
        )

    def test_create_builds_new_instance_each_call(
        self, factory: ServiceFactory[T]
    ) -> None:
        """Verify create() does not cache; singleton caching belongs to the Registry."""
        first = factory.create()
        second = factory.create()
        assert first is not second, "create() must build a new instance per call"

    def test_factory_resolves_as_singleton(self, factory: ServiceFactory[T]) -> None:
        """Verify the factory can back a singleton registration."""
        registry = Registry()
        registry.register("contract-subject", "singleton", factory)

        first = registry.resolve("contract-subject")
        second = registry.resolve("contract-subject")

        assert first is second, "Registry must return the cached singleton"
