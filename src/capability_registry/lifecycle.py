"""Provider lifecycle management for the capability registry."""

from dataclasses import dataclass
from enum import StrEnum

from capability_registry.erasure import ErasedFactory, erase
from capability_registry.keys import NormalisedKey, normalise_key


class Lifetime(StrEnum):
    """How often a provider's factory runs.

    SINGLETON: built once on first resolution, then shared
    TRANSIENT: built fresh on every resolution
    """

    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class ProviderDescriptor[T]:
    """Descriptor for a capability binding with lifecycle configuration.

    Attributes:
        key: Capability key (normalised on construction)
        factory: Type-erased provider that creates instances (plain callables
            and ServiceFactory objects are wrapped on construction)
        lifetime: Provider lifetime ("singleton" or "transient")

    """

    key: NormalisedKey
    factory: ErasedFactory[T]
    lifetime: Lifetime = Lifetime.SINGLETON

    def __post_init__(self) -> None:
        """Normalise the key, erase the factory and coerce plain lifetime strings to Lifetime.

        Raises:
            InvalidCapabilityKey: If the key is empty or unsupported
            ValueError: If the lifetime is not a known value

        """
        object.__setattr__(self, "key", normalise_key(self.key))
        object.__setattr__(self, "factory", erase(self.factory))
        object.__setattr__(self, "lifetime", Lifetime(self.lifetime))
