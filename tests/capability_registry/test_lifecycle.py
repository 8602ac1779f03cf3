"""Tests for provider descriptors and lifetimes."""

import pytest

from capability_registry import (
    CapabilityKey,
    ErasedFactory,
    InvalidCapabilityKey,
    Lifetime,
    ProviderDescriptor,
)

from .conftest import Clock


class TestLifetime:
    """Test the Lifetime enum."""

    def test_values_are_plain_strings(self) -> None:
        assert Lifetime.SINGLETON == "singleton"
        assert Lifetime("transient") is Lifetime.TRANSIENT

    def test_unknown_lifetime_raises(self) -> None:
        with pytest.raises(ValueError):
            Lifetime("scoped")


class TestProviderDescriptor:
    """Test descriptor normalisation on construction."""

    def test_defaults_to_singleton(self) -> None:
        descriptor = ProviderDescriptor(key="clock", factory=Clock)

        assert descriptor.lifetime is Lifetime.SINGLETON

    def test_wraps_plain_callable(self) -> None:
        descriptor = ProviderDescriptor(key=Clock, factory=Clock, lifetime="transient")

        assert isinstance(descriptor.factory, ErasedFactory)
        assert isinstance(descriptor.factory.create(), Clock)
        assert descriptor.lifetime is Lifetime.TRANSIENT

    def test_normalises_typed_key_to_name(self) -> None:
        descriptor = ProviderDescriptor(key=CapabilityKey[Clock]("clock"), factory=Clock)

        assert descriptor.key == "clock"

    def test_rejects_blank_key(self) -> None:
        with pytest.raises(InvalidCapabilityKey):
            ProviderDescriptor(key="", factory=Clock)

    def test_rejects_unknown_lifetime(self) -> None:
        with pytest.raises(ValueError):
            ProviderDescriptor(key="clock", factory=Clock, lifetime="scoped")
