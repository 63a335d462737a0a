"""
Tests for configuration module
"""
import logging

import pytest


class TestParseCsv:

    def test_splits_and_strips(self):
        from config import parse_csv
        assert parse_csv("cpu, memory ,nvidia.com/gpu") == ("cpu", "memory", "nvidia.com/gpu")

    def test_empty_yields_nothing(self):
        from config import parse_csv
        assert parse_csv("") == ()
        assert parse_csv(None) == ()
        assert parse_csv(",,") == ()


class TestParseArgs:

    def test_defaults(self):
        from config import parse_args
        settings = parse_args([])
        assert settings["port"] == 8080
        assert settings["resources"] == ()
        assert settings["node_labels"] == ()
        assert settings["interval"] == 10.0
        assert settings["shutdown_timeout"] == 300.0

    def test_short_flags(self):
        from config import parse_args
        settings = parse_args(["-p", "9100", "-r", "cpu,memory", "-l", "topology.kubernetes.io/zone"])
        assert settings["port"] == 9100
        assert settings["resources"] == ("cpu", "memory")
        assert settings["node_labels"] == ("topology.kubernetes.io/zone",)

    def test_env_helpers_read_environment(self, monkeypatch):
        from config import _env_int, _env_float
        monkeypatch.setenv("EXPORTER_PORT", "9000")
        monkeypatch.setenv("SAMPLING_INTERVAL_SECONDS", "2.5")
        assert _env_int("EXPORTER_PORT", 8080) == 9000
        assert _env_float("SAMPLING_INTERVAL_SECONDS", 10.0) == 2.5

    def test_env_helpers_fall_back_on_blank_or_invalid(self, monkeypatch):
        from config import _env_int, _env_float
        monkeypatch.setenv("EXPORTER_PORT", "eighty")
        monkeypatch.setenv("SAMPLING_INTERVAL_SECONDS", "")
        monkeypatch.delenv("SHUTDOWN_TIMEOUT_SECONDS", raising=False)
        assert _env_int("EXPORTER_PORT", 8080) == 8080
        assert _env_float("SAMPLING_INTERVAL_SECONDS", 10.0) == 10.0
        assert _env_float("SHUTDOWN_TIMEOUT_SECONDS", 300.0) == 300.0


class TestConfigValidation:

    def _settings(self, **overrides):
        settings = {"port": 8080, "interval": 10.0, "shutdown_timeout": 300.0}
        settings.update(overrides)
        return settings

    def test_valid_config_passes(self):
        from config import validate_settings
        validate_settings(self._settings())
        validate_settings(self._settings(port=0))

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 70000},
        {"interval": 0},
        {"shutdown_timeout": -5},
    ])
    def test_invalid_values_fail(self, overrides):
        from config import validate_settings, ConfigValidationError
        with pytest.raises(ConfigValidationError):
            validate_settings(self._settings(**overrides))

    def test_all_errors_reported_together(self):
        from config import validate_settings, ConfigValidationError
        with pytest.raises(ConfigValidationError) as excinfo:
            validate_settings(self._settings(port=-1, interval=0))
        message = str(excinfo.value)
        assert "port" in message
        assert "interval" in message


class TestLoggingSetup:

    def test_setup_logging_configures_root(self):
        from config import setup_logging
        setup_logging()
        root_logger = logging.getLogger()
        assert root_logger.level in [logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR]
        assert logging.getLogger("kubernetes").level == logging.WARNING
