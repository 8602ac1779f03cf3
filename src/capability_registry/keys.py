"""Capability keys.

A capability can be identified by a plain string, by a type token, or by a
typed `CapabilityKey[T]`. The typed key carries the value type for static
checkers, so `registry.resolve(CLOCK)` is typed without any cast:

    >>> CLOCK = CapabilityKey[Clock]("clock")
    >>> registry.register(CLOCK, "singleton", SystemClock)
    >>> clock = registry.resolve(CLOCK)  # inferred as Clock

All three forms normalise to a single hashable value, so `"clock"` and
`CapabilityKey("clock")` name the same capability.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from typing_extensions import override

from capability_registry.errors import InvalidCapabilityKey

type NormalisedKey = str | type[Any]
type KeyLike = str | type[Any] | CapabilityKey[Any]


@dataclass(frozen=True)
class CapabilityKey[T]:
    """Typed, immutable identifier for an abstract capability.

    Attributes:
        name: Stable, non-empty identifier of the capability

    """

    name: str

    def __post_init__(self) -> None:
        """Reject names that cannot identify a capability."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidCapabilityKey(
                f"Capability key name must be a non-empty string, got: {self.name!r}"
            )

    @override
    def __str__(self) -> str:
        return self.name


def normalise_key(key: KeyLike) -> NormalisedKey:
    """Reduce any supported key form to its lookup value.

    Args:
        key: String, type token or CapabilityKey

    Returns:
        The string name, or the type itself for type tokens

    Raises:
        InvalidCapabilityKey: If the key is empty or of an unsupported kind

    """
    if isinstance(key, CapabilityKey):
        return key.name
    if isinstance(key, type):
        return key
    if isinstance(key, str):
        if not key.strip():
            raise InvalidCapabilityKey("Capability key must not be empty")
        return key
    raise InvalidCapabilityKey(
        f"Unsupported capability key {key!r} ({type(key).__name__}); "
        "use a string, a type or a CapabilityKey"
    )


def describe_key(key: KeyLike) -> str:
    """Human readable name of a key, for logs and error messages."""
    if isinstance(key, type):
        return key.__qualname__
    return str(key)
