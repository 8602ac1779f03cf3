"""CLI command implementations for capreg."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from capability_registry.bootstrap import (
    BootstrapDocument,
    BootstrapLoader,
    ProviderEntry,
    build_registry,
    discover_providers,
    provider_for_entry,
)
from capability_registry.errors import RegistryError
from capability_registry.logging import setup_logging

logger = logging.getLogger(__name__)
console = Console()


class CLIError(Exception):
    """Base exception for CLI-related errors."""

    pass


class OutputFormatter:
    """Handles formatting CLI output for different commands."""

    def format_provider_list(self, document: BootstrapDocument, source: Path) -> None:
        """Format and print the providers declared in a bootstrap document.

        Args:
            document: Validated bootstrap document
            source: File the document was loaded from
        """
        if not document.providers:
            console.print(
                Panel(
                    f"[yellow]No providers declared in {source}.[/yellow]",
                    title="Warning",
                    border_style="yellow",
                )
            )
            logger.warning("No providers declared in %s", source)
            return

        table = Table(
            title=f"Providers in {source.name}",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Lifetime", style="green")
        table.add_column("Kind", style="blue")
        table.add_column("Target", style="dim")

        for entry in document.providers:
            table.add_row(entry.key, str(entry.lifetime), entry.kind, entry.target)

        console.print(table)
        overwrite = "allowed" if document.registry.allow_overwrite else "rejected"
        console.print(f"[dim]Re-registration: {overwrite}[/dim]")

    def format_validation(self, rows: list[tuple[str, bool, str]]) -> None:
        """Format and print per-provider validation results.

        Args:
            rows: (key, ok, detail) per provider
        """
        table = Table(
            title="Bootstrap Validation Results",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Status")
        table.add_column("Detail", style="white")

        for key, ok, detail in rows:
            status = "[green]✅ OK[/green]" if ok else "[red]❌ Failed[/red]"
            table.add_row(key, status, detail)

        console.print(table)

    def format_resolved(self, key: str, instance: object) -> None:
        """Format and print a resolved capability."""
        instance_type = type(instance)
        content = (
            f"[bold]Key:[/bold] {key}\n"
            f"[bold]Type:[/bold] {instance_type.__module__}.{instance_type.__qualname__}\n"
            f"[bold]Value:[/bold] {escape(repr(instance))}"
        )
        console.print(
            Panel(content, title="Resolved Capability", border_style="green")
        )


def setup_cli_logging(log_level: str, verbose: bool = False) -> None:
    """Set up logging for CLI commands.

    Args:
        log_level: Logging level string
        verbose: Override with DEBUG level if True
    """
    effective_log_level = "DEBUG" if verbose else log_level
    setup_logging(level=effective_log_level)


def handle_cli_error(error: Exception, message: str) -> NoReturn:
    """Handle CLI errors with consistent formatting.

    Args:
        error: The exception that occurred
        message: User-friendly error message
    """
    logger.error("%s: %s", message, error)

    error_panel = Panel(f"[red]{escape(str(error))}[/red]", title=f"❌ {message}", border_style="red")
    console.print(error_panel)
    raise typer.Exit(1) from error


def list_providers_command(bootstrap_path: Path, log_level: str = "INFO") -> None:
    """CLI command implementation for listing declared providers."""
    setup_cli_logging(log_level)

    try:
        document = BootstrapLoader.load(bootstrap_path)
    except RegistryError as e:
        handle_cli_error(e, "Failed to load bootstrap")
    except Exception as e:
        handle_cli_error(e, "Unexpected error while loading bootstrap")

    OutputFormatter().format_provider_list(document, bootstrap_path)


def _check_provider(entry: ProviderEntry) -> tuple[str, bool, str]:
    try:
        provider = provider_for_entry(entry)
        available = provider.can_create()
    except RegistryError as e:
        return entry.key, False, escape(str(e))
    except Exception as e:
        return entry.key, False, escape(f"{type(e).__name__}: {e}")

    if available:
        return entry.key, True, provider.description
    return entry.key, False, f"{provider.description} cannot create"


def validate_bootstrap_command(bootstrap_path: Path, log_level: str = "INFO") -> None:
    """CLI command implementation for validating a bootstrap file.

    Every target is imported and asked whether it can create an instance;
    factory objects are instantiated but no capability is constructed.
    """
    setup_cli_logging(log_level)

    try:
        document = BootstrapLoader.load(bootstrap_path)
    except RegistryError as e:
        handle_cli_error(e, "Bootstrap validation failed")
    except Exception as e:
        handle_cli_error(e, "Unexpected error while loading bootstrap")

    rows = [_check_provider(entry) for entry in document.providers]
    OutputFormatter().format_validation(rows)

    failures = [key for key, ok, _ in rows if not ok]
    if failures:
        handle_cli_error(
            CLIError(f"{len(failures)} provider(s) invalid: {', '.join(failures)}"),
            "Bootstrap validation failed",
        )

    console.print(
        f"\n[bold green]✅ {len(rows)} provider(s) valid in {bootstrap_path}[/bold green]"
    )


def resolve_capability_command(
    bootstrap_path: Path,
    key: str,
    discover: bool = False,
    log_level: str = "INFO",
) -> None:
    """CLI command implementation for resolving one capability."""
    setup_cli_logging(log_level)

    try:
        registry = build_registry(bootstrap_path)
        if discover:
            discover_providers(registry)
        instance = registry.resolve(key)
    except RegistryError as e:
        handle_cli_error(e, f"Failed to resolve '{key}'")
    except Exception as e:
        handle_cli_error(e, f"Provider for '{key}' failed")

    OutputFormatter().format_resolved(key, instance)
