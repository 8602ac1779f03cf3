"""Contract tests for ServiceFactory implementations."""

import pytest

from capability_registry.erasure import ErasedFactory
from capability_registry.protocols import ServiceFactory
from capability_registry.testing import ServiceFactoryContractTests


class Mailer:
    """Capability produced by the factories under test."""

    def __init__(self, host: str) -> None:
        self.host = host


class MailerFactory:
    """ServiceFactory that builds Mailer instances for a configured host."""

    def __init__(self, host: str) -> None:
        self._host = host

    def create(self) -> Mailer | None:
        if not self.can_create():
            return None
        return Mailer(self._host)

    def can_create(self) -> bool:
        return bool(self._host)


class TestMailerFactoryContract(ServiceFactoryContractTests[Mailer]):
    """Run the shared contract against a hand-written ServiceFactory."""

    @pytest.fixture
    def factory(self) -> ServiceFactory[Mailer]:
        return MailerFactory("localhost")


class TestErasedFactoryContract(ServiceFactoryContractTests[Mailer]):
    """Run the shared contract against a factory erased from a callable."""

    @pytest.fixture
    def factory(self) -> ServiceFactory[Mailer]:
        return ErasedFactory.from_callable(lambda: Mailer("localhost"))
