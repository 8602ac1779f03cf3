"""Registry bootstrap from YAML files and entry points.

A bootstrap file declares which providers an application registers at start
up, so the wiring can change (real vs. fake implementations, per
environment) without touching code:

    registry:
      allow_overwrite: true
    providers:
      - key: clock
        target: "myapp.clock:SystemClock"
        lifetime: singleton
      - key: mailer
        target: "myapp.mail:MailerFactory"
        kind: factory

Provider kinds:
- callable: the target is a zero-argument callable (function or class)
- factory: the target is a ServiceFactory class, instantiated with no arguments
- instance: the target object itself is registered as a singleton

Installed packages can also contribute providers through the
``capability_registry.providers`` entry point group; each entry point is a
callable receiving the Registry.
"""

from __future__ import annotations

import importlib
import logging
from importlib.metadata import entry_points
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from capability_registry.configuration import RegistryConfiguration
from capability_registry.erasure import ErasedFactory, is_service_factory
from capability_registry.errors import BootstrapLoadError, BootstrapValidationError
from capability_registry.lifecycle import Lifetime
from capability_registry.registry import Registry

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_POINT_GROUP = "capability_registry.providers"

__all__ = [
    "DEFAULT_ENTRY_POINT_GROUP",
    "BootstrapDocument",
    "BootstrapLoader",
    "ProviderEntry",
    "apply_bootstrap",
    "build_registry",
    "discover_providers",
    "import_target",
    "provider_for_entry",
]


class ProviderEntry(BaseModel):
    """Pydantic model for one provider declaration."""

    model_config = ConfigDict(extra="forbid")

    key: str = Field(min_length=1, description="Capability key to bind")
    target: str = Field(
        pattern=r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$",
        description="Import path of the provider, 'package.module:attribute'",
    )
    lifetime: Lifetime = Field(
        default=Lifetime.SINGLETON, description="Provider lifetime"
    )
    kind: Literal["callable", "factory", "instance"] = Field(
        default="callable", description="How the target is turned into a provider"
    )

    @field_validator("key")
    @classmethod
    def validate_key_not_blank(cls, v: str) -> str:
        """Validate that the key is not only whitespace."""
        if not v.strip():
            raise ValueError("Capability key cannot be blank")
        return v

    @model_validator(mode="after")
    def validate_instance_is_singleton(self) -> ProviderEntry:
        """Pre-built instances can only be shared, never rebuilt."""
        if self.kind == "instance" and self.lifetime is not Lifetime.SINGLETON:
            raise ValueError(
                f"Provider '{self.key}' has kind 'instance' and must use singleton lifetime"
            )
        return self


class BootstrapDocument(BaseModel):
    """Pydantic model for a complete bootstrap file."""

    model_config = ConfigDict(extra="forbid")

    registry: RegistryConfiguration = Field(
        default_factory=RegistryConfiguration, description="Registry settings"
    )
    providers: list[ProviderEntry] = Field(
        default_factory=list, description="Providers to register, in order"
    )

    @model_validator(mode="before")
    @classmethod
    def apply_environment_fallback(cls, data: Any) -> Any:  # noqa: ANN401  # raw YAML value
        """Fill registry settings missing from the file from the environment."""
        if isinstance(data, dict):
            registry = data.get("registry")
            if registry is None:
                registry = {}
            if isinstance(registry, dict):
                data = {**data, "registry": RegistryConfiguration.with_environment(registry)}
        return data

    @field_validator("providers")
    @classmethod
    def validate_unique_keys(cls, providers: list[ProviderEntry]) -> list[ProviderEntry]:
        """Validate that each key is declared once."""
        keys = [entry.key for entry in providers]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ValueError(f"Duplicate provider keys found: {duplicates}")
        return providers


class BootstrapLoader:
    """Loads and parses YAML bootstrap files into validated Pydantic models."""

    @classmethod
    def load(cls, bootstrap_path: Path) -> BootstrapDocument:
        """Load and validate a bootstrap file.

        Args:
            bootstrap_path: Path to the bootstrap YAML file

        Returns:
            Validated BootstrapDocument instance

        Raises:
            BootstrapLoadError: If the file cannot be read or parsed
            BootstrapValidationError: If the document is invalid

        """
        logger.debug("Loading bootstrap from: %s", bootstrap_path)

        raw_data = cls._load_file(bootstrap_path)
        try:
            document = BootstrapDocument.model_validate(
                {} if raw_data is None else raw_data
            )
        except ValidationError as e:
            error_details: list[str] = []
            for error in e.errors():
                location = (
                    " -> ".join(str(part) for part in error["loc"])
                    if error["loc"]
                    else "root"
                )
                error_details.append(f"  {location}: {error['msg']}")

            error_message = "Bootstrap validation failed:\n" + "\n".join(error_details)
            raise BootstrapValidationError(error_message) from e

        logger.info(
            "Loaded bootstrap %s with %d providers",
            bootstrap_path,
            len(document.providers),
        )
        return document

    @staticmethod
    def _load_file(file_path: Path) -> Any:  # noqa: ANN401  # raw YAML
        try:
            with open(file_path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise BootstrapLoadError(f"Invalid YAML in {file_path}: {e}") from e
        except OSError as e:
            raise BootstrapLoadError(f"Cannot read file {file_path}: {e}") from e


def import_target(target: str) -> Any:  # noqa: ANN401
    """Import an object from a 'package.module:attribute' path.

    The attribute part may be dotted to reach nested attributes.

    Raises:
        BootstrapLoadError: If the module cannot be imported or the attribute is missing

    """
    module_name, sep, attribute_path = target.partition(":")
    if not sep or not module_name or not attribute_path:
        raise BootstrapLoadError(
            f"Invalid target '{target}', expected 'package.module:attribute'"
        )

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise BootstrapLoadError(f"Cannot import module '{module_name}': {e}") from e
    except Exception as e:
        # Syntax errors and exceptions raised while the module body runs
        raise BootstrapLoadError(
            f"Error while importing module '{module_name}': {type(e).__name__}: {e}"
        ) from e

    for part in attribute_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise BootstrapLoadError(
                f"Module '{module_name}' has no attribute '{attribute_path}'"
            ) from e
    return obj


def provider_for_entry(entry: ProviderEntry) -> ErasedFactory[Any]:
    """Turn a provider declaration into a type-erased provider.

    Raises:
        BootstrapLoadError: If the target cannot be used as the declared kind

    """
    target = import_target(entry.target)

    if entry.kind == "instance":
        return ErasedFactory.from_instance(target)

    if entry.kind == "factory":
        if not callable(target):
            raise BootstrapLoadError(
                f"Factory target '{entry.target}' for '{entry.key}' is not callable"
            )
        try:
            factory = target()
        except Exception as e:
            raise BootstrapLoadError(
                f"Cannot instantiate factory '{entry.target}' for '{entry.key}': {e}"
            ) from e
        if not is_service_factory(factory):
            raise BootstrapLoadError(
                f"Factory target '{entry.target}' for '{entry.key}' does not provide "
                "create() and can_create()"
            )
        return ErasedFactory.from_service_factory(factory)

    if not callable(target):
        raise BootstrapLoadError(
            f"Target '{entry.target}' for '{entry.key}' is not callable; "
            "use kind 'instance' to register it as a value"
        )
    return ErasedFactory.from_callable(target)


def apply_bootstrap(document: BootstrapDocument, registry: Registry) -> list[str]:
    """Register every provider declared in a bootstrap document.

    Args:
        document: Validated bootstrap document
        registry: Registry to populate

    Returns:
        Registered keys, in declaration order

    Raises:
        BootstrapLoadError: If a provider target cannot be loaded
        DuplicateRegistration: If a strict registry already binds a key

    """
    registered: list[str] = []
    for entry in document.providers:
        registry.register(entry.key, entry.lifetime, provider_for_entry(entry))
        registered.append(entry.key)

    logger.info("Bootstrap registered %d providers", len(registered))
    return registered


def build_registry(bootstrap_path: Path) -> Registry:
    """Create and populate a registry from a bootstrap file."""
    document = BootstrapLoader.load(bootstrap_path)
    registry = Registry.from_configuration(document.registry)
    apply_bootstrap(document, registry)
    return registry


def discover_providers(
    registry: Registry, group: str = DEFAULT_ENTRY_POINT_GROUP
) -> list[str]:
    """Let installed packages register their providers via entry points.

    Each entry point must load to a callable accepting the registry. A
    failing entry point is logged and skipped so one broken plugin cannot
    prevent start up.

    Args:
        registry: Registry handed to each entry point
        group: Entry point group to scan

    Returns:
        Names of the entry points that registered successfully

    """
    loaded: list[str] = []
    for ep in entry_points(group=group):
        try:
            register_func = ep.load()
            register_func(registry)
            loaded.append(ep.name)
            logger.debug("Registered providers from '%s'", ep.name)
        except Exception as e:
            logger.warning("Failed to register providers from '%s': %s", ep.name, e)
    return loaded
