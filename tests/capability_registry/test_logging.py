"""Tests for capreg logging configuration."""

import logging

import pytest

from capability_registry.logging import (
    LoggingError,
    get_config_path,
    load_config,
    setup_logging,
)

PACKAGE_LOGGER = "capability_registry"


@pytest.fixture(autouse=True)
def restore_logging():
    """Restore root and package logger state changed by setup_logging."""
    root = logging.getLogger()
    package = logging.getLogger(PACKAGE_LOGGER)
    root_state = (list(root.handlers), root.level)
    package_state = (list(package.handlers), package.level, package.propagate)

    yield

    root.handlers[:] = root_state[0]
    root.setLevel(root_state[1])
    package.handlers[:] = package_state[0]
    package.setLevel(package_state[1])
    package.propagate = package_state[2]


class TestGetConfigPath:
    """Test selection of packaged logging configuration files."""

    def test_default_configuration(self) -> None:
        assert get_config_path().name == "logging.yaml"

    def test_environment_argument_selects_config(self) -> None:
        assert get_config_path(environment="dev").name == "logging-dev.yaml"

    def test_environment_variable_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CAPREG_ENV", "development")

        assert get_config_path().name == "logging-dev.yaml"

    def test_missing_environment_config_falls_back_to_default(self) -> None:
        assert get_config_path(environment="prod").name == "logging.yaml"


class TestLoadConfig:
    """Test reading logging configuration files."""

    def test_loads_packaged_config(self) -> None:
        config = load_config(get_config_path())

        assert config["version"] == 1
        assert PACKAGE_LOGGER in config["loggers"]

    def test_invalid_yaml_raises(self, tmp_path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("handlers: [unclosed\n", encoding="utf-8")

        with pytest.raises(LoggingError, match="Failed to parse YAML"):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(LoggingError, match="Invalid configuration format"):
            load_config(path)

    def test_missing_file_raises(self, tmp_path) -> None:
        with pytest.raises(LoggingError, match="Failed to read config file"):
            load_config(tmp_path / "absent.yaml")


class TestSetupLogging:
    """Test applying logging configuration."""

    def test_applies_packaged_config(self) -> None:
        setup_logging()

        package = logging.getLogger(PACKAGE_LOGGER)
        assert package.level == logging.INFO
        assert package.propagate is False

    def test_level_override_applies_to_loggers_and_handlers(self) -> None:
        setup_logging(level="debug")

        package = logging.getLogger(PACKAGE_LOGGER)
        assert package.level == logging.DEBUG
        assert all(handler.level == logging.DEBUG for handler in package.handlers)

    def test_higher_level_does_not_raise_handler_level(self) -> None:
        setup_logging(level="ERROR")

        package = logging.getLogger(PACKAGE_LOGGER)
        assert package.level == logging.ERROR
        assert all(handler.level == logging.WARNING for handler in package.handlers)

    def test_unreadable_config_falls_back_to_basic(self, tmp_path) -> None:
        setup_logging(config_path=tmp_path / "absent.yaml", level="ERROR")

        assert logging.getLogger().level == logging.ERROR

    def test_invalid_level_falls_back_to_basic(self) -> None:
        setup_logging(level="LOUD")

        assert logging.getLogger().level == logging.INFO
