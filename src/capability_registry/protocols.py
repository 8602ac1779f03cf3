"""Provider protocols for the capability registry."""

from typing import Any, Protocol


class ServiceFactory[T](Protocol):
    """Protocol for factory objects that build capability instances.

    Plain zero-argument callables are the simplest providers. Use a
    ServiceFactory when the provider needs its own configuration or wants to
    report whether it can build anything at all (missing credentials, an
    optional dependency that is not installed, and so on).

    The protocol methods (create, can_create) take NO parameters.
    Configuration is held by the factory instance, not passed per-call.

    Example:
        ```python
        class MailerFactory:
            def __init__(self, config: MailerConfiguration | None = None):
                self._config = config

            def can_create(self) -> bool:
                return self._config is not None

            def create(self) -> Mailer | None:
                if not self._config:
                    return None
                return SmtpMailer(self._config.host)

        registry.register(Mailer, "singleton", MailerFactory(config))
        ```

    """

    def create(self) -> T | None:
        """Create a capability instance.

        Returns:
            Instance, or None if the capability is unavailable.

        """
        ...

    def can_create(self) -> bool:
        """Check if the factory can create an instance.

        Returns:
            True if an instance can be created, False otherwise.

        """
        ...


class ServiceProvider(Protocol):
    """Protocol for exception-free views over a registry.

    Unlike Registry.resolve() (which raises for unregistered or unavailable
    capabilities), providers return None, enabling graceful degradation for
    optional capabilities.

    Example:
        ```python
        mailer = provider.get_service(Mailer)
        if mailer:
            mailer.send(report)
        else:
            logger.info("No mailer configured, skipping notification")
        ```

    """

    def get_service(self, key: Any) -> Any | None:  # noqa: ANN401
        """Get the capability instance, or None if unavailable or unregistered."""
        ...

    def is_available(self, key: Any) -> bool:  # noqa: ANN401
        """Check whether the capability can currently be resolved."""
        ...
