"""Unit tests for structured logging."""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import structlog

from buraq.core.logging import (
    REDACTED,
    LogContext,
    add_environment_info,
    get_logger,
    log_exception,
    redact_sensitive,
    setup_logging,
)


class TestAddEnvironmentInfo:
    """Tests for add_environment_info processor."""

    def test_adds_environment(self):
        """Test environment is added to event dict."""
        mock_settings = MagicMock()
        mock_settings.environment = "production"

        with patch("buraq.core.logging.get_settings", return_value=mock_settings):
            result = add_environment_info(None, "info", {})

        assert result["environment"] == "production"


class TestRedactSensitive:
    """Tests for redact_sensitive processor."""

    @pytest.mark.parametrize(
        "field_name",
        ["key", "master_key", "private_key", "secret", "token", "password", "plaintext", "Ciphertext"],
    )
    def test_masks_sensitive_fields(self, field_name: str):
        """Test secret-bearing fields are masked."""
        result = redact_sensitive(None, "info", {"event": "x", field_name: "value"})
        assert result[field_name] == REDACTED
        assert result["event"] == "x"

    def test_leaves_other_fields(self):
        """Test ordinary fields pass through."""
        event_dict = {"event": "key_generated", "algorithm": "RS256", "bits": 2048}
        assert redact_sensitive(None, "info", dict(event_dict)) == event_dict


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self):
        """Test logging setup with default settings."""
        setup_logging()
        assert get_logger("test") is not None

    def test_setup_logging_custom_level(self):
        """Test logging setup with custom log level."""
        setup_logging(log_level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_json_output_redacts(self, capsys: pytest.CaptureFixture[str]):
        """Test JSON output never contains a masked value."""
        setup_logging(log_level="INFO", json_format=True)
        get_logger("test").info("key_generated", algorithm="HS256", key="raw-secret")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "key_generated"
        assert event["key"] == REDACTED
        assert "raw-secret" not in line


class TestLogContext:
    """Tests for LogContext context manager."""

    def test_log_context_binds_values(self):
        """Test that LogContext binds values during block."""
        setup_logging()
        structlog.contextvars.clear_contextvars()

        with LogContext(operation="issue_server_key", environment_id="env-1"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx.get("operation") == "issue_server_key"
            assert ctx.get("environment_id") == "env-1"

        ctx = structlog.contextvars.get_contextvars()
        assert "operation" not in ctx
        assert "environment_id" not in ctx


class TestLogException:
    """Tests for log_exception helper."""

    def test_logs_type_and_message(self):
        """Test exception details are logged as a warning."""
        logger = MagicMock()
        log_exception(logger, ValueError("bad input"), operation="decrypt")

        logger.warning.assert_called_once_with(
            "exception_occurred",
            error_type="ValueError",
            error_message="bad input",
            operation="decrypt",
        )
