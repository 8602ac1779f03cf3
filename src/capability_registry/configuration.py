"""Configuration classes for registries and provider factories.

This module provides a base configuration class that provider factories can
inherit from, and the configuration of the registry itself. Both give
consistent validation, immutability, and a `from_properties` factory.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self, override

ALLOW_OVERWRITE_ENV = "CAPREG_ALLOW_OVERWRITE"


class BaseServiceConfiguration(BaseModel):
    """Base class for provider and registry configurations.

    Features:
        - Pydantic validation for type safety
        - Immutable by default (frozen) for configuration integrity
        - from_properties() factory method for dictionary-based creation
        - Strict validation (no extra fields allowed)

    Example:
        ```python
        class MailerConfiguration(BaseServiceConfiguration):
            host: str
            port: int = 25

        config = MailerConfiguration.from_properties({"host": "smtp.local"})
        registry.register(Mailer, "singleton", MailerFactory(config))
        ```

    """

    model_config = ConfigDict(
        # Immutable - configuration cannot be modified after creation
        frozen=True,
        # Strict - extra fields not in the model are rejected
        extra="forbid",
        validate_assignment=True,
    )

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from properties dictionary with validation.

        Subclasses may override this method to add environment variable
        fallback and other preprocessing.

        Args:
            properties: Dictionary containing configuration properties

        Returns:
            Validated configuration instance

        Raises:
            ValidationError: If properties are invalid or missing required fields

        """
        return cls.model_validate(properties)


class RegistryConfiguration(BaseServiceConfiguration):
    """Configuration of a Registry.

    Attributes:
        allow_overwrite: Whether register() silently replaces an existing
            binding (last write wins). When False, duplicates raise
            DuplicateRegistration and replace() must be used instead.

    """

    allow_overwrite: bool = Field(
        default=True,
        description="Allow register() to replace an existing binding",
    )

    @classmethod
    @override
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from properties with environment fallback.

        Environment variables used:
        - CAPREG_ALLOW_OVERWRITE: "true"/"1"/"yes" enables overwrite,
          any other non-empty value disables it

        Explicit properties take precedence over the environment.

        Args:
            properties: Configuration properties dictionary

        Returns:
            Validated configuration instance

        Raises:
            ValidationError: If configuration is invalid

        """
        return cls.model_validate(cls.with_environment(properties))

    @staticmethod
    def with_environment(properties: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of properties with environment defaults filled in."""
        config_data = properties.copy()

        if "allow_overwrite" not in config_data:
            env_value = os.getenv(ALLOW_OVERWRITE_ENV, "")
            if env_value:
                config_data["allow_overwrite"] = env_value.lower() in ("true", "1", "yes")

        return config_data
