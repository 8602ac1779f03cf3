"""Capability registry - type-keyed dependency registry.

This package binds abstract capabilities (a string, a type, or a typed
CapabilityKey) to providers with singleton or transient lifetimes, and
resolves them later without callers knowing the concrete implementation.
"""

__version__ = "0.1.0"

from capability_registry.bootstrap import (
    BootstrapDocument,
    BootstrapLoader,
    ProviderEntry,
    apply_bootstrap,
    build_registry,
    discover_providers,
)
from capability_registry.configuration import (
    BaseServiceConfiguration,
    RegistryConfiguration,
)
from capability_registry.erasure import ErasedFactory, erase
from capability_registry.errors import (
    BootstrapError,
    BootstrapLoadError,
    BootstrapValidationError,
    CircularDependency,
    DuplicateRegistration,
    InvalidCapabilityKey,
    ProviderUnavailable,
    RegistryError,
    UnregisteredCapability,
)
from capability_registry.keys import CapabilityKey, describe_key, normalise_key
from capability_registry.lifecycle import Lifetime, ProviderDescriptor
from capability_registry.protocols import ServiceFactory, ServiceProvider
from capability_registry.provider import RegistryProvider
from capability_registry.registry import Registry, RegistryState

__all__ = [
    # Version
    "__version__",
    # Core
    "CapabilityKey",
    "ErasedFactory",
    "Lifetime",
    "ProviderDescriptor",
    "Registry",
    "RegistryProvider",
    "RegistryState",
    "ServiceFactory",
    "ServiceProvider",
    "describe_key",
    "erase",
    "normalise_key",
    # Configuration
    "BaseServiceConfiguration",
    "RegistryConfiguration",
    # Bootstrap
    "BootstrapDocument",
    "BootstrapLoader",
    "ProviderEntry",
    "apply_bootstrap",
    "build_registry",
    "discover_providers",
    # Errors
    "RegistryError",
    "UnregisteredCapability",
    "ProviderUnavailable",
    "DuplicateRegistration",
    "CircularDependency",
    "InvalidCapabilityKey",
    "BootstrapError",
    "BootstrapLoadError",
    "BootstrapValidationError",
]
