"""Main entry point for capreg, the capability registry CLI.

This module provides commands for:
- Listing the providers declared in a bootstrap file
- Validating a bootstrap file without building anything
- Resolving a single capability from a bootstrap file
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from capability_registry.cli import (
    list_providers_command,
    resolve_capability_command,
    validate_bootstrap_command,
)

# Load environment variables from .env file if it exists
_ = load_dotenv()

app = typer.Typer(name="capreg", no_args_is_help=True)

BootstrapArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the bootstrap YAML file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]

LogLevelOption = Annotated[
    str,
    typer.Option(
        "--log-level",
        help="Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        case_sensitive=False,
    ),
]


@app.command(name="ls")
def list_providers(bootstrap: BootstrapArgument, log_level: LogLevelOption = "INFO") -> None:
    """List the providers declared in a bootstrap file."""
    list_providers_command(bootstrap, log_level)


@app.command(name="validate")
def validate_bootstrap(
    bootstrap: BootstrapArgument, log_level: LogLevelOption = "INFO"
) -> None:
    """Validate a bootstrap file and check every provider can be created."""
    validate_bootstrap_command(bootstrap, log_level)


@app.command(name="resolve")
def resolve_capability(
    bootstrap: BootstrapArgument,
    key: Annotated[str, typer.Argument(help="Capability key to resolve")],
    discover: Annotated[
        bool,
        typer.Option(
            "--discover",
            help="Also register providers contributed by installed packages",
        ),
    ] = False,
    log_level: LogLevelOption = "INFO",
) -> None:
    """Build the registry from a bootstrap file and resolve one capability.

    Example:
        capreg resolve bootstrap.yaml clock --log-level DEBUG

    """
    resolve_capability_command(bootstrap, key, discover, log_level)


if __name__ == "__main__":
    app()
