"""Workspace-level pytest configuration and fixtures.

This file provides shared fixtures and configuration for all tests.
"""

import pytest

from capability_registry.configuration import ALLOW_OVERWRITE_ENV


@pytest.fixture(autouse=True, scope="function")
def isolate_registry_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep registry environment settings from leaking into tests.

    Registry configuration falls back to environment variables, and the CLI
    loads a .env file on import, so every test starts without them.
    """
    monkeypatch.delenv(ALLOW_OVERWRITE_ENV, raising=False)
    monkeypatch.delenv("CAPREG_ENV", raising=False)
