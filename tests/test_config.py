"""Tests for configuration management module."""

import logging
import os
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from toolbox_api.config import Settings, validate_settings_on_startup


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        # Export defaults
        assert settings.exports_dir == "excel-exports"
        assert settings.base_url == "http://localhost:3000"

        # Retention defaults
        assert settings.enable_retention_sweeper is True
        assert settings.retention_max_age_minutes == 60
        assert settings.retention_interval_minutes == 60

        # Web page reader defaults
        assert settings.fetch_timeout_seconds == 30.0
        assert "toolbox-api" in settings.fetch_user_agent

        # Logging defaults
        assert settings.log_level == "INFO"
        assert settings.debug is False

        # Server defaults
        assert settings.cors_origins == "*"
        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 3000

    def test_environment_variable_prefix(self) -> None:
        """Test that environment variables use the TOOLBOX_ prefix."""
        env_vars = {
            "TOOLBOX_EXPORTS_DIR": "/var/exports",
            "TOOLBOX_RETENTION_MAX_AGE_MINUTES": "120",
            "TOOLBOX_LOG_LEVEL": "DEBUG",
            "EXPORTS_DIR": "/ignored",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.exports_dir == "/var/exports"
        assert settings.retention_max_age_minutes == 120
        assert settings.log_level == "DEBUG"

    def test_base_url_from_prefixed_variable(self) -> None:
        env_vars = {"TOOLBOX_BASE_URL": "https://toolbox.example.com/"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.base_url == "https://toolbox.example.com"

    def test_base_url_from_hosting_platform_variable(self) -> None:
        env_vars = {"RENDER_EXTERNAL_URL": "https://toolbox.onrender.com"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.base_url == "https://toolbox.onrender.com"

    def test_computed_properties(self) -> None:
        env_vars = {
            "TOOLBOX_EXPORTS_DIR": "out",
            "TOOLBOX_RETENTION_MAX_AGE_MINUTES": "90",
            "TOOLBOX_RETENTION_INTERVAL_MINUTES": "15",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.exports_path == Path("out")
        assert settings.retention_max_age == timedelta(minutes=90)
        assert settings.retention_interval == timedelta(minutes=15)

    def test_cors_origins_list(self) -> None:
        env_vars = {
            "TOOLBOX_CORS_ORIGINS": "https://example.com, https://api.example.com"
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cors_origins_list == [
            "https://example.com",
            "https://api.example.com",
        ]

    def test_cors_origins_list_wildcard(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cors_origins_list == ["*"]

    @pytest.mark.parametrize(
        ("level_str", "expected_int"),
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
        ],
    )
    def test_log_level_int_property(self, level_str: str, expected_int: int) -> None:
        with patch.dict(os.environ, {"TOOLBOX_LOG_LEVEL": level_str}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.log_level_int == expected_int

    def test_to_safe_dict(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        safe_dict = settings.to_safe_dict()

        assert safe_dict["exports_dir"] == "excel-exports"
        assert safe_dict["server_port"] == 3000
        assert set(safe_dict) >= {"base_url", "retention_max_age_minutes"}


class TestSettingsValidation:
    """Tests for settings validation."""

    def test_lowercase_log_level_normalized(self) -> None:
        with patch.dict(os.environ, {"TOOLBOX_LOG_LEVEL": "debug"}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_raises_error(self) -> None:
        with (
            patch.dict(os.environ, {"TOOLBOX_LOG_LEVEL": "LOUD"}, clear=True),
            pytest.raises(ValueError, match="Invalid log level"),
        ):
            Settings(_env_file=None)

    def test_base_url_must_be_http(self) -> None:
        with (
            patch.dict(os.environ, {"TOOLBOX_BASE_URL": "ftp://files"}, clear=True),
            pytest.raises(ValueError, match="http"),
        ):
            Settings(_env_file=None)

    @pytest.mark.parametrize(
        "variable",
        ["TOOLBOX_RETENTION_MAX_AGE_MINUTES", "TOOLBOX_RETENTION_INTERVAL_MINUTES"],
    )
    def test_retention_minutes_must_be_positive(self, variable: str) -> None:
        with (
            patch.dict(os.environ, {variable: "0"}, clear=True),
            pytest.raises(ValueError, match="at least 1"),
        ):
            Settings(_env_file=None)

    def test_fetch_timeout_must_be_positive(self) -> None:
        with (
            patch.dict(os.environ, {"TOOLBOX_FETCH_TIMEOUT_SECONDS": "0"}, clear=True),
            pytest.raises(ValueError, match="must be positive"),
        ):
            Settings(_env_file=None)

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_port_must_be_valid(self, port: str) -> None:
        with (
            patch.dict(os.environ, {"TOOLBOX_SERVER_PORT": port}, clear=True),
            pytest.raises(ValueError, match="between 1 and 65535"),
        ):
            Settings(_env_file=None)


class TestValidateSettingsOnStartup:
    """Tests for the validate_settings_on_startup function."""

    def test_warns_when_sweeper_disabled(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        env_vars = {"TOOLBOX_ENABLE_RETENTION_SWEEPER": "false"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "Retention sweeper is disabled" in caplog.text

    def test_warns_about_localhost_base_url(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "Set TOOLBOX_BASE_URL" in caplog.text

    def test_warns_about_permissive_cors_in_production(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with patch.dict(os.environ, {"TOOLBOX_DEBUG": "false"}, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "CORS is configured to allow all origins" in caplog.text

    def test_quiet_for_deployed_configuration(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        env_vars = {
            "TOOLBOX_BASE_URL": "https://toolbox.example.com",
            "TOOLBOX_CORS_ORIGINS": "https://app.example.com",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert caplog.text == ""

    def test_logs_configuration_summary(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.INFO):
            validate_settings_on_startup(settings)

        assert "Configuration loaded" in caplog.text
