"""Tests for the capreg command line interface."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from capability_registry.__main__ import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI commands from reconfiguring global logging during tests."""
    with patch("capability_registry.cli.setup_logging") as mock_setup:
        yield mock_setup


class TestListCommand:
    """Test `capreg ls`."""

    def test_lists_declared_providers(self, write_bootstrap) -> None:
        path = write_bootstrap(
            """
            providers:
              - key: clock
                target: "app:Clock"
              - key: token
                target: "app:token"
                lifetime: transient
            """
        )

        result = runner.invoke(app, ["ls", str(path)])

        assert result.exit_code == 0, result.output
        assert "clock" in result.output
        assert "token" in result.output
        assert "transient" in result.output

    def test_warns_when_no_providers(self, write_bootstrap) -> None:
        result = runner.invoke(app, ["ls", str(write_bootstrap("providers: []\n"))])

        assert result.exit_code == 0
        assert "No providers declared" in result.output

    def test_invalid_document_exits_with_error(self, write_bootstrap) -> None:
        path = write_bootstrap("providers:\n  - {key: clock, target: nope}\n")

        result = runner.invoke(app, ["ls", str(path)])

        assert result.exit_code == 1
        assert "Failed to load bootstrap" in result.output

    def test_log_level_is_passed_to_logging_setup(self, write_bootstrap, no_logging_setup) -> None:
        runner.invoke(app, ["ls", str(write_bootstrap("")), "--log-level", "DEBUG"])

        no_logging_setup.assert_called_once_with(level="DEBUG")


class TestValidateCommand:
    """Test `capreg validate`."""

    def test_valid_bootstrap_passes(self, write_bootstrap, targets_module) -> None:
        path = write_bootstrap(
            f"""
            providers:
              - key: clock
                target: "{targets_module}:SystemClock"
              - key: factory-clock
                target: "{targets_module}:ClockFactory"
                kind: factory
            """
        )

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0, result.output
        assert "2 provider(s) valid" in result.output

    def test_unimportable_and_unavailable_providers_fail(
        self, write_bootstrap, targets_module
    ) -> None:
        path = write_bootstrap(
            f"""
            providers:
              - key: missing
                target: "capreg_no_such_module:Thing"
              - key: offline
                target: "{targets_module}:UnavailableFactory"
                kind: factory
            """
        )

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "2 provider(s) invalid" in result.output

    def test_validate_does_not_construct_callables(self, write_bootstrap, targets_module) -> None:
        path = write_bootstrap(
            f"""
            providers:
              - key: token
                target: "{targets_module}:make_token"
            """
        )

        with patch("secrets.token_hex") as mock_token:
            result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0, result.output
        mock_token.assert_not_called()

    def test_modules_failing_on_import_are_reported(
        self, write_bootstrap, broken_modules
    ) -> None:
        path = write_bootstrap(
            f"""
            providers:
              - key: syntax
                target: "{broken_modules['syntax']}:oops"
              - key: raising
                target: "{broken_modules['raising']}:anything"
            """
        )

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert not isinstance(result.exception, RuntimeError)
        assert "2 provider(s) invalid" in result.output


class TestResolveCommand:
    """Test `capreg resolve`."""

    def test_resolves_registered_key(self, write_bootstrap, targets_module) -> None:
        path = write_bootstrap(
            f"""
            providers:
              - key: defaults
                target: "{targets_module}:DEFAULTS"
                kind: instance
            """
        )

        result = runner.invoke(app, ["resolve", str(path), "defaults"])

        assert result.exit_code == 0, result.output
        assert "timeout" in result.output
        assert "builtins.dict" in result.output

    def test_unregistered_key_exits_with_error(self, write_bootstrap) -> None:
        result = runner.invoke(app, ["resolve", str(write_bootstrap("")), "missing"])

        assert result.exit_code == 1
        assert "is not registered" in result.output

    def test_failing_provider_exits_with_error(self, write_bootstrap, targets_module) -> None:
        path = write_bootstrap(
            f"""
            providers:
              - key: boom
                target: "{targets_module}:exploding"
            """
        )

        result = runner.invoke(app, ["resolve", str(path), "boom"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, RuntimeError)
        assert "provider failure" in result.output

    def test_module_failing_on_import_exits_with_error(
        self, write_bootstrap, broken_modules
    ) -> None:
        path = write_bootstrap(
            f"""
            providers:
              - key: raising
                target: "{broken_modules['raising']}:anything"
            """
        )

        result = runner.invoke(app, ["resolve", str(path), "raising"])

        assert result.exit_code == 1
        assert "bad import" in result.output

    def test_discover_registers_entry_point_providers(self, write_bootstrap) -> None:
        with patch("capability_registry.cli.discover_providers") as mock_discover:
            mock_discover.side_effect = lambda registry: registry.register_instance(
                "plugin", "from-plugin"
            )

            result = runner.invoke(
                app, ["resolve", str(write_bootstrap("")), "plugin", "--discover"]
            )

        assert result.exit_code == 0, result.output
        assert "from-plugin" in result.output

    def test_missing_bootstrap_file_is_rejected(self, tmp_path) -> None:
        result = runner.invoke(app, ["resolve", str(tmp_path / "absent.yaml"), "x"])

        assert result.exit_code != 0
