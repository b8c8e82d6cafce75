"""Tests for settings and logging setup."""

import json
import logging

import pytest

from sysguard.config import DEFAULT_PAGE_SIZE, DEFAULT_REFRESH_INTERVAL, Settings
from sysguard.errors import ConfigError, SysguardError
from sysguard.logging_setup import get_logger, setup_logging


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.page_size == DEFAULT_PAGE_SIZE == 30
        assert settings.refresh_interval == DEFAULT_REFRESH_INTERVAL == 2.0
        assert settings.log_file is None

    @pytest.mark.parametrize("page_size", [0, -5])
    def test_page_size_must_be_positive(self, page_size):
        with pytest.raises(ConfigError):
            Settings(page_size=page_size)

    def test_interval_must_be_positive(self):
        with pytest.raises(ConfigError):
            Settings(refresh_interval=0)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
        assert issubclass(ConfigError, SysguardError)

    def test_from_env(self):
        settings = Settings.from_env(
            {
                "SYSGUARD_PAGE_SIZE": "50",
                "SYSGUARD_REFRESH_INTERVAL": "0.5",
                "SYSGUARD_LOG_LEVEL": "DEBUG",
                "SYSGUARD_LOG_FILE": "/tmp/sysguard.log",
            }
        )
        assert settings.page_size == 50
        assert settings.refresh_interval == 0.5
        assert settings.log_level == "DEBUG"
        assert settings.log_file == "/tmp/sysguard.log"

    def test_from_env_empty(self):
        assert Settings.from_env({}) == Settings()

    def test_from_env_rejects_garbage(self):
        with pytest.raises(ConfigError):
            Settings.from_env({"SYSGUARD_PAGE_SIZE": "lots"})

    def test_settings_are_frozen(self):
        settings = Settings()
        with pytest.raises(AttributeError):
            settings.page_size = 10


class TestLogging:
    """Tests for structlog setup."""

    def teardown_method(self):
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)

    def test_writes_json_lines_to_file(self, tmp_path):
        log_file = tmp_path / "logs" / "sysguard.log"
        setup_logging("DEBUG", log_file)

        get_logger("sysguard.test", component="tests").info("collector.scan", count=3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "collector.scan"
        assert entry["count"] == 3
        assert entry["component"] == "tests"
        assert entry["level"] == "info"

    def test_without_file_uses_null_handler(self):
        setup_logging("INFO")
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)
