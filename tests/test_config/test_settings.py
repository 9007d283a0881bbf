"""Tests for application settings and startup helpers."""

import os
import sys
from unittest.mock import patch

import pytest
from pydantic import ValidationError

sys.path.append("src")
from tradelab.config.logging import log_audit_event
from tradelab.config.settings import (
    Settings,
    get_required_env_vars,
    get_settings,
    validate_required_settings,
)
from tradelab.utils.config import validate_environment


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.endpoint_port == 3001
        assert settings.frontend_url == "http://localhost:5173"
        assert settings.base_day_interval_ms == 5000
        assert settings.allowed_upload_extensions == ["pdf", "doc", "docx", "txt"]
        assert settings.max_upload_size_bytes == 10 * 1024 * 1024

    def test_reads_environment(self):
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "env-key"}):
            assert Settings(_env_file=None).anthropic_api_key == "env-key"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("environment", "staging"),
            ("endpoint_port", 70000),
            ("base_day_interval_ms", 0),
            ("volatility_multiplier", -1.0),
            ("log_level", "LOUD"),
            ("log_format", "xml"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_extensions_normalized(self):
        settings = Settings(_env_file=None, allowed_upload_extensions=[".PDF", "Txt"])
        assert settings.allowed_upload_extensions == ["pdf", "txt"]

    def test_database_url_override(self):
        settings = Settings(_env_file=None, database_url="sqlite:///:memory:")
        assert settings.get_database_url() == "sqlite:///:memory:"

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestRequiredSettings:
    def test_required_vars(self):
        assert get_required_env_vars() == ["ANTHROPIC_API_KEY"]

    def test_missing_key(self):
        with patch(
            "tradelab.config.settings.get_settings",
            return_value=Settings(_env_file=None, anthropic_api_key=None),
        ):
            assert validate_required_settings() is False

    def test_environment_validation(self):
        with patch(
            "tradelab.utils.config.validate_required_settings", return_value=True
        ):
            assert validate_environment() is True


class TestAuditLogging:
    def test_audit_event_logs(self):
        with patch("tradelab.config.logging.get_logger") as mock_get_logger:
            log_audit_event("trade_executed", user_id="user-1", symbol="AAPL")

        mock_get_logger.assert_called_once_with("audit")
        mock_get_logger.return_value.info.assert_called_once_with(
            "Audit event", audit_event="trade_executed", user_id="user-1", symbol="AAPL"
        )
