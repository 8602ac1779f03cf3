"""Shared test fixtures for capability registry tests."""

import itertools
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from capability_registry import Registry


class Clock:
    """Simple capability used as a type key in tests."""

    pass


class SystemClock(Clock):
    """Concrete Clock implementation."""

    pass


class FakeClock(Clock):
    """Substitute Clock implementation for override tests."""

    pass


class CountingFactory:
    """Zero-argument callable that records how often it was invoked."""

    def __init__(self, build: Callable[[], object] = object) -> None:
        self.calls = 0
        self._build = build

    def __call__(self) -> object:
        self.calls += 1
        return self._build()


class ClockFactory:
    """Factory that creates SystemClock instances.

    This factory is compliant with the ServiceFactory protocol.
    """

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.create_count = 0

    def create(self) -> SystemClock | None:
        """Create a new SystemClock, or None when unavailable."""
        self.create_count += 1
        return SystemClock() if self.available else None

    def can_create(self) -> bool:
        """Check if factory can create a clock."""
        return self.available


@pytest.fixture
def registry() -> Registry:
    """Provide a fresh registry per test."""
    return Registry()


@pytest.fixture
def strict_registry() -> Registry:
    """Provide a registry that rejects duplicate registrations."""
    return Registry(allow_overwrite=False)


@pytest.fixture
def counting_factory() -> CountingFactory:
    """Provide a factory returning a new counter-wrapped value per call."""
    counter = itertools.count(1)
    return CountingFactory(lambda: {"value": next(counter)})


@pytest.fixture
def clock_factory() -> ClockFactory:
    """Provide an available ClockFactory."""
    return ClockFactory()


TARGETS_MODULE = "capreg_test_targets"

TARGETS_SOURCE = '''
import secrets


class SystemClock:
    pass


def make_token():
    return secrets.token_hex(8)


class ClockFactory:
    def create(self):
        return SystemClock()

    def can_create(self):
        return True


class UnavailableFactory:
    def create(self):
        return None

    def can_create(self):
        return False


class NotAFactory:
    pass


DEFAULTS = {"timeout": 30}


class Nested:
    class Inner:
        pass


def register_plugin(registry):
    registry.register("plugin", "singleton", SystemClock)


def broken_plugin(registry):
    raise RuntimeError("plugin failure")


def exploding():
    raise RuntimeError("provider failure")
'''


@pytest.fixture
def targets_module(tmp_path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write an importable module of provider targets and return its name."""
    (tmp_path / f"{TARGETS_MODULE}.py").write_text(TARGETS_SOURCE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, TARGETS_MODULE, raising=False)
    return TARGETS_MODULE


@pytest.fixture
def write_bootstrap(tmp_path):
    """Write bootstrap YAML text to a file and return its path."""

    def _write(content: str, name: str = "bootstrap.yaml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


BROKEN_MODULES = {
    "capreg_syntax_error_targets": "def oops(:\n    pass\n",
    "capreg_raising_targets": "raise RuntimeError('bad import')\n",
}


@pytest.fixture
def broken_modules(tmp_path, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Write modules that fail on import, keyed by the kind of failure."""
    module_dir = tmp_path / "broken"
    module_dir.mkdir()
    for name, source in BROKEN_MODULES.items():
        (module_dir / f"{name}.py").write_text(source, encoding="utf-8")
        monkeypatch.delitem(sys.modules, name, raising=False)
    monkeypatch.syspath_prepend(str(module_dir))
    return {
        "syntax": "capreg_syntax_error_targets",
        "raising": "capreg_raising_targets",
    }
