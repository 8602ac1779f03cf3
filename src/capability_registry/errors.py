"""Error classes for the capability registry.

This module provides:
- RegistryError: Base exception class for all registry errors
- UnregisteredCapability: Raised when resolving a key with no binding
- ProviderUnavailable: Raised when a provider produced no value
- DuplicateRegistration: Raised by strict registries on a repeated key
- CircularDependency: Raised when a provider resolves itself while being built
- InvalidCapabilityKey: Raised for empty or unusable keys
- BootstrapError, BootstrapLoadError, BootstrapValidationError: Bootstrap exceptions
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from typing_extensions import override


def _describe_key(key: Any) -> str:  # noqa: ANN401
    if isinstance(key, type):
        return key.__qualname__
    return str(key)


class RegistryError(Exception):
    """Base exception for all capability registry errors."""

    pass


class UnregisteredCapability(RegistryError, KeyError):
    """Raised when a capability is resolved without a prior registration.

    Subclasses KeyError so that callers catching lookup failures generically
    keep working.

    Attributes:
        key: The key that was looked up, exactly as the caller passed it

    """

    def __init__(self, key: Any, message: str | None = None) -> None:  # noqa: ANN401  # keys are caller-defined
        """Initialise with the missing key.

        Args:
            key: The key that has no binding
            message: Optional override for the default message

        """
        self.key = key
        self.message = message or f"Capability '{_describe_key(key)}' is not registered"
        super().__init__(self.message)

    @override
    def __str__(self) -> str:
        # KeyError would otherwise render the repr of the message
        return self.message


class ProviderUnavailable(RegistryError):
    """Raised when a provider returns None instead of a capability instance."""

    def __init__(self, key: Any) -> None:  # noqa: ANN401
        """Initialise with the key whose provider produced nothing."""
        self.key = key
        super().__init__(
            f"Provider for '{_describe_key(key)}' returned None - capability unavailable"
        )


class DuplicateRegistration(RegistryError):
    """Raised when a strict registry receives a second registration for a key."""

    def __init__(self, key: Any) -> None:  # noqa: ANN401
        """Initialise with the key that is already bound."""
        self.key = key
        super().__init__(
            f"Capability '{_describe_key(key)}' is already registered; "
            "use replace() to overwrite it"
        )


class CircularDependency(RegistryError):
    """Raised when resolving a capability requires that same capability."""

    def __init__(self, chain: Sequence[str]) -> None:
        """Initialise with the resolution chain that closed the cycle.

        Args:
            chain: Described keys in resolution order, ending with the repeated key

        """
        self.chain = tuple(chain)
        super().__init__("Circular dependency detected: " + " -> ".join(self.chain))


class InvalidCapabilityKey(RegistryError, ValueError):
    """Raised when a key is empty or cannot identify a capability."""

    pass


class BootstrapError(RegistryError):
    """Base exception for bootstrap-related errors."""

    pass


class BootstrapLoadError(BootstrapError):
    """Raised when a bootstrap file or provider target cannot be loaded."""

    pass


class BootstrapValidationError(BootstrapError):
    """Raised when a bootstrap document is structurally invalid."""

    pass
