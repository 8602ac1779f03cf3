"""Capability registry for dependency injection."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypedDict, overload

from capability_registry.erasure import ErasedFactory, erase
from capability_registry.errors import (
    CircularDependency,
    DuplicateRegistration,
    ProviderUnavailable,
    UnregisteredCapability,
)
from capability_registry.keys import (
    CapabilityKey,
    KeyLike,
    NormalisedKey,
    describe_key,
    normalise_key,
)
from capability_registry.lifecycle import Lifetime, ProviderDescriptor
from capability_registry.protocols import ServiceFactory

if TYPE_CHECKING:
    from capability_registry.configuration import RegistryConfiguration

logger = logging.getLogger(__name__)

type Provider[T] = ErasedFactory[T] | ServiceFactory[T] | Callable[[], T]

_MISSING = object()


class RegistryState(TypedDict):
    """State snapshot for Registry.

    Used for test isolation - captures and restores bindings and cached
    singletons so a test can swap providers without leaking.
    """

    descriptors: dict[NormalisedKey, ProviderDescriptor[Any]]
    singletons: dict[NormalisedKey, Any]


class Registry:
    """Type-keyed registry binding capabilities to providers.

    Providers are registered during bootstrap and resolved later, anywhere,
    without the caller knowing the concrete implementation. Registries are
    plain objects: construct one per application (or per test) and pass it
    to whatever needs it.

    Registration policy:
        By default a second registration for the same key silently replaces
        the first (last write wins). Construct with ``allow_overwrite=False``
        to make duplicates fail; ``replace()`` then performs the overwrite
        explicitly.

    Thread safety:
        A registry lock guards the binding table and is never held while a
        factory runs. Singleton construction is serialised per key, so
        concurrent first resolutions of a singleton build exactly one
        instance while other keys stay resolvable from any thread.
        Factories may resolve other capabilities from inside their own
        construction.

    Example:
        >>> registry = Registry()
        >>> registry.register(Clock, "singleton", SystemClock)
        >>> registry.register("token", "transient", lambda: secrets.token_hex(8))
        >>> clock = registry.resolve(Clock)

    """

    def __init__(self, *, allow_overwrite: bool = True) -> None:
        """Initialise an empty registry.

        Args:
            allow_overwrite: Whether register() may replace an existing binding

        """
        self._allow_overwrite = allow_overwrite
        # Descriptors are stored type-erased; typing is enforced at the public
        # API level through CapabilityKey[T] and type[T] overloads
        self._descriptors: dict[NormalisedKey, ProviderDescriptor[Any]] = {}
        self._singletons: dict[NormalisedKey, Any] = {}
        self._lock = threading.RLock()
        self._construction_locks: dict[NormalisedKey, threading.Lock] = {}
        self._local = threading.local()
        logger.debug("Registry initialised (allow_overwrite=%s)", allow_overwrite)

    @classmethod
    def from_configuration(cls, config: RegistryConfiguration) -> Registry:
        """Create a registry from validated configuration."""
        return cls(allow_overwrite=config.allow_overwrite)

    @property
    def allow_overwrite(self) -> bool:
        """Whether register() silently replaces existing bindings."""
        return self._allow_overwrite

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register[T](
        self,
        key: CapabilityKey[T] | type[T] | str,
        lifetime: Lifetime | str,
        factory: Provider[T],
    ) -> None:
        """Bind a capability key to a provider.

        Any previous binding for the key is replaced and its cached
        singleton dropped, unless the registry is strict.

        Args:
            key: Capability identifier
            lifetime: "singleton" or "transient"
            factory: Zero-argument callable or ServiceFactory producing instances

        Raises:
            DuplicateRegistration: If the key is bound and overwrite is disallowed
            InvalidCapabilityKey: If the key is empty or unsupported
            TypeError: If the factory is not a supported provider
            ValueError: If the lifetime is unknown

        """
        descriptor = ProviderDescriptor(
            normalise_key(key), erase(factory), Lifetime(lifetime)
        )
        self._bind(key, descriptor, replace=False)

    def register_instance[T](self, key: CapabilityKey[T] | type[T] | str, instance: T) -> None:
        """Bind a capability key to an already-built singleton value.

        Args:
            key: Capability identifier
            instance: Value returned by every resolution of the key

        """
        descriptor = ProviderDescriptor(
            normalise_key(key), ErasedFactory.from_instance(instance), Lifetime.SINGLETON
        )
        self._bind(key, descriptor, replace=False)

    def register_descriptor[T](self, descriptor: ProviderDescriptor[T]) -> None:
        """Register a prepared descriptor.

        Args:
            descriptor: Descriptor containing key, factory and lifetime

        """
        self._bind(descriptor.key, descriptor, replace=False)

    def replace[T](
        self,
        key: CapabilityKey[T] | type[T] | str,
        lifetime: Lifetime | str,
        factory: Provider[T],
    ) -> None:
        """Explicitly overwrite an existing binding.

        Works regardless of ``allow_overwrite``.

        Raises:
            UnregisteredCapability: If there is no binding to replace

        """
        descriptor = ProviderDescriptor(
            normalise_key(key), erase(factory), Lifetime(lifetime)
        )
        self._bind(key, descriptor, replace=True)

    def unregister(self, key: KeyLike) -> None:
        """Remove a binding and any cached singleton for it.

        Raises:
            UnregisteredCapability: If the key has no binding

        """
        normalised = normalise_key(key)
        with self._lock:
            if normalised not in self._descriptors:
                raise UnregisteredCapability(key)
            del self._descriptors[normalised]
            self._singletons.pop(normalised, None)
        logger.debug("Unregistered capability: %s", describe_key(key))

    def clear(self) -> None:
        """Remove every binding and cached singleton."""
        with self._lock:
            count = len(self._descriptors)
            self._descriptors.clear()
            self._singletons.clear()
        logger.debug("Registry cleared (%d bindings removed)", count)

    def _bind(
        self, key: KeyLike, descriptor: ProviderDescriptor[Any], *, replace: bool
    ) -> None:
        normalised = descriptor.key
        with self._lock:
            exists = normalised in self._descriptors
            if replace and not exists:
                raise UnregisteredCapability(
                    key, f"Cannot replace '{describe_key(key)}': it is not registered"
                )
            if exists and not replace and not self._allow_overwrite:
                raise DuplicateRegistration(key)

            self._descriptors[normalised] = descriptor
            self._singletons.pop(normalised, None)

        if exists:
            logger.debug(
                "Replaced capability: %s with lifetime: %s (%s)",
                describe_key(key),
                descriptor.lifetime,
                descriptor.factory.description,
            )
        else:
            logger.debug(
                "Registered capability: %s with lifetime: %s (%s)",
                describe_key(key),
                descriptor.lifetime,
                descriptor.factory.description,
            )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @overload
    def resolve[T](self, key: CapabilityKey[T]) -> T: ...

    @overload
    def resolve[T](self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: str) -> Any: ...  # noqa: ANN401

    def resolve(self, key: KeyLike) -> Any:
        """Get a capability instance.

        Singleton providers are invoked once and the instance is cached;
        transient providers are invoked on every call.

        Args:
            key: Capability identifier

        Returns:
            Capability instance

        Raises:
            UnregisteredCapability: If no binding exists for the key
            ProviderUnavailable: If the provider returned None
            CircularDependency: If the provider resolves its own key

        """
        normalised = normalise_key(key)
        stack = self._resolution_stack()
        if normalised in stack:
            chain = [describe_key(k) for k in stack[stack.index(normalised) :]]
            raise CircularDependency([*chain, describe_key(normalised)])

        stack.append(normalised)
        try:
            return self._resolve(key, normalised)
        finally:
            stack.pop()

    def _resolve(self, key: KeyLike, normalised: NormalisedKey) -> Any:  # noqa: ANN401
        name = describe_key(key)
        with self._lock:
            descriptor = self._lookup(key, normalised)
            if descriptor.lifetime is Lifetime.SINGLETON:
                if normalised in self._singletons:
                    logger.debug("Returning cached singleton: %s", name)
                    return self._singletons[normalised]
                construction_lock = self._construction_locks.setdefault(
                    normalised, threading.Lock()
                )

        if descriptor.lifetime is Lifetime.TRANSIENT:
            logger.debug("Creating transient: %s", name)
            return self._create(key, descriptor)

        # Only builders of this key wait here; the registry lock is free
        with construction_lock:
            with self._lock:
                if normalised in self._singletons:
                    logger.debug("Returning cached singleton: %s", name)
                    return self._singletons[normalised]
                descriptor = self._lookup(key, normalised)

            logger.debug("Creating singleton: %s", name)
            instance = self._create(key, descriptor)

            with self._lock:
                # A replace() or override() during construction wins
                if (
                    descriptor.lifetime is Lifetime.SINGLETON
                    and self._descriptors.get(normalised) is descriptor
                ):
                    self._singletons[normalised] = instance
                    logger.debug("Singleton created and cached: %s", name)
            return instance

    def _lookup(self, key: KeyLike, normalised: NormalisedKey) -> ProviderDescriptor[Any]:
        descriptor = self._descriptors.get(normalised)
        if descriptor is None:
            logger.debug("Capability not registered: %s", describe_key(key))
            raise UnregisteredCapability(key)
        return descriptor

    def _create(self, key: KeyLike, descriptor: ProviderDescriptor[Any]) -> Any:  # noqa: ANN401
        instance = descriptor.factory.create()
        if instance is None:
            logger.error(
                "Provider for %s returned None - capability unavailable",
                describe_key(key),
            )
            raise ProviderUnavailable(key)
        return instance

    def _resolution_stack(self) -> list[NormalisedKey]:
        stack: list[NormalisedKey] | None = getattr(self._local, "stack", None)
        if stack is None:
            stack = []
            self._local.stack = stack
        return stack

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def is_registered(self, key: KeyLike) -> bool:
        """Check whether a binding exists for the key."""
        normalised = normalise_key(key)
        with self._lock:
            return normalised in self._descriptors

    def descriptor(self, key: KeyLike) -> ProviderDescriptor[Any]:
        """Get the descriptor bound to a key.

        Raises:
            UnregisteredCapability: If the key has no binding

        """
        normalised = normalise_key(key)
        with self._lock:
            try:
                return self._descriptors[normalised]
            except KeyError:
                raise UnregisteredCapability(key) from None

    def keys(self) -> list[NormalisedKey]:
        """List the normalised keys of all current bindings."""
        with self._lock:
            return list(self._descriptors)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str | type | CapabilityKey):
            return False
        return self.is_registered(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._descriptors)

    # ------------------------------------------------------------------
    # Test support
    # ------------------------------------------------------------------

    def snapshot_state(self) -> RegistryState:
        """Capture bindings and cached singletons for later restoration."""
        with self._lock:
            return {
                "descriptors": self._descriptors.copy(),
                "singletons": self._singletons.copy(),
            }

    def restore_state(self, state: RegistryState) -> None:
        """Restore bindings and cached singletons from snapshot_state()."""
        with self._lock:
            self._descriptors = state["descriptors"].copy()
            self._singletons = state["singletons"].copy()

    @contextmanager
    def override[T](
        self,
        key: CapabilityKey[T] | type[T] | str,
        factory: Provider[T],
        lifetime: Lifetime | str = Lifetime.SINGLETON,
    ) -> Iterator[None]:
        """Temporarily bind a substitute provider, e.g. a mock in a test.

        The previous binding (or its absence) and any cached singleton are
        restored on exit. Overrides ignore ``allow_overwrite``.

        Example:
            >>> with registry.override(Mailer, FakeMailer):
            ...     send_weekly_report(registry)

        """
        normalised = normalise_key(key)
        descriptor = ProviderDescriptor(normalised, erase(factory), Lifetime(lifetime))

        with self._lock:
            previous = self._descriptors.get(normalised)
            previous_instance = self._singletons.pop(normalised, _MISSING)
            self._descriptors[normalised] = descriptor
        logger.debug("Overriding capability: %s", describe_key(key))

        try:
            yield
        finally:
            with self._lock:
                self._singletons.pop(normalised, None)
                if previous is None:
                    self._descriptors.pop(normalised, None)
                else:
                    self._descriptors[normalised] = previous
                    if previous_instance is not _MISSING:
                        self._singletons[normalised] = previous_instance
            logger.debug("Restored capability: %s", describe_key(key))
