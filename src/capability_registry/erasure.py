"""Type-erased provider wrapper.

The registry holds providers of many unrelated value types side by side.
Rather than storing them as `Any` and casting on the way out, every provider
is wrapped in an `ErasedFactory`: a small concrete adapter that closes over
the concrete provider and exposes a fixed, non-generic interface
(`create()`, `can_create()`, `description`). The wrapped provider can be a
plain callable, a ServiceFactory object, or an already-built instance.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, cast

from capability_registry.protocols import ServiceFactory


def _always() -> bool:
    return True


def _describe_callable(fn: Callable[..., Any]) -> str:
    module = getattr(fn, "__module__", None)
    name = getattr(fn, "__qualname__", None) or type(fn).__qualname__
    return f"{module}.{name}" if module else name


@dataclass(frozen=True)
class ErasedFactory[T]:
    """Concrete adapter forwarding to a wrapped provider through closures.

    Attributes:
        create: Builds a value (or returns None when unavailable)
        can_create: Reports whether `create` is expected to succeed
        description: Where the provider comes from, for logs and the CLI

    """

    create: Callable[[], T | None]
    can_create: Callable[[], bool] = field(default=_always)
    description: str = "<provider>"

    @classmethod
    def from_callable(cls, fn: Callable[[], T]) -> ErasedFactory[T]:
        """Wrap a zero-argument callable (function, lambda or class)."""
        return cls(create=fn, description=_describe_callable(fn))

    @classmethod
    def from_service_factory(cls, factory: ServiceFactory[T]) -> ErasedFactory[T]:
        """Wrap an object implementing the ServiceFactory protocol."""
        return cls(
            create=factory.create,
            can_create=factory.can_create,
            description=_describe_callable(type(factory)),
        )

    @classmethod
    def from_instance(cls, value: T) -> ErasedFactory[T]:
        """Wrap a pre-built value; every call returns that same object."""
        return cls(
            create=lambda: value,
            description=f"instance of {_describe_callable(type(value))}",
        )


def is_service_factory(obj: object) -> bool:
    """Check whether obj looks like a ServiceFactory instance (not a class)."""
    if isinstance(obj, type):
        return False
    return callable(getattr(obj, "create", None)) and callable(
        getattr(obj, "can_create", None)
    )


def erase[T](provider: ErasedFactory[T] | ServiceFactory[T] | Callable[[], T]) -> ErasedFactory[T]:
    """Wrap any supported provider in an ErasedFactory.

    ServiceFactory objects take precedence over plain callables, so an object
    that is both callable and a factory is driven through `create()`.

    Args:
        provider: ErasedFactory, ServiceFactory object or zero-argument callable

    Returns:
        The wrapped provider

    Raises:
        TypeError: If the provider is none of the supported kinds

    """
    if isinstance(provider, ErasedFactory):
        return cast(ErasedFactory[T], provider)
    if is_service_factory(provider):
        return ErasedFactory.from_service_factory(cast(ServiceFactory[T], provider))
    if callable(provider):
        return ErasedFactory.from_callable(cast(Callable[[], T], provider))
    raise TypeError(
        f"Provider must be a zero-argument callable or a ServiceFactory, "
        f"got {type(provider).__name__}; use register_instance() for pre-built values"
    )
