"""Exception-safe access to a registry.

This module provides a ServiceProvider implementation that wraps a Registry
so optional capabilities can be looked up without try/except at every call
site.
"""

from __future__ import annotations

import logging
from typing import Any, overload

from capability_registry.errors import ProviderUnavailable, UnregisteredCapability
from capability_registry.keys import CapabilityKey, KeyLike, describe_key
from capability_registry.registry import Registry

logger = logging.getLogger(__name__)


class RegistryProvider:
    """Service provider for registry capabilities with exception-safe retrieval.

    Implements the ServiceProvider protocol. Unregistered and unavailable
    capabilities yield None; any other exception raised while building the
    capability (including circular dependencies) still propagates, because
    it indicates a bug rather than a missing optional dependency.

    Example:
        ```python
        provider = RegistryProvider(registry)
        mailer = provider.get_service(Mailer)

        if mailer:
            mailer.send(report)
        ```

    """

    def __init__(self, registry: Registry) -> None:
        """Initialise provider with a registry.

        Args:
            registry: Registry holding the bindings

        """
        self._registry = registry
        logger.debug("RegistryProvider initialised")

    @property
    def registry(self) -> Registry:
        """Get the underlying registry."""
        return self._registry

    @overload
    def get_service[T](self, key: CapabilityKey[T]) -> T | None: ...

    @overload
    def get_service[T](self, key: type[T]) -> T | None: ...

    @overload
    def get_service(self, key: str) -> Any | None: ...  # noqa: ANN401

    def get_service(self, key: KeyLike) -> Any | None:
        """Get capability instance, or None if unavailable.

        Args:
            key: Capability identifier

        Returns:
            Instance, or None if the capability is unregistered or its
            provider produced nothing.

        """
        try:
            service = self._registry.resolve(key)
            logger.debug("Retrieved capability: %s", describe_key(key))
            return service
        except (UnregisteredCapability, ProviderUnavailable) as e:
            logger.debug("Capability %s unavailable: %s", describe_key(key), e)
            return None

    def get_or_default[T](self, key: CapabilityKey[T] | type[T] | str, default: T) -> T:
        """Get capability instance, falling back to a default value."""
        service = self.get_service(key)
        return default if service is None else service

    def is_available(self, key: KeyLike) -> bool:
        """Check if a capability can be resolved.

        For singletons this builds and caches the instance.

        """
        return self.get_service(key) is not None
