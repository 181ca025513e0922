"""
Tests for error types, configuration selection and backend call logging.
"""
import json
import logging
import pytest
import structlog
from datetime import date
from unittest.mock import patch

from talentdesk.config import LocalConfig, ProductionConfig, SandboxConfig, _env_flag, get_config
from talentdesk.errors import (
    ErrorCode,
    HttpError,
    InvalidRangeError,
    NetworkError,
    ValidationError,
)
from talentdesk.logging_config import BackendCallContext, configure_logging


# ==============================================================================
# ERRORS
# ==============================================================================

class TestErrors:
    """Tests for the error hierarchy."""

    def test_validation_error_to_dict(self):
        error = ValidationError("Bad date", code=ErrorCode.DATE_OUT_OF_RANGE, field="date")

        assert error.to_dict() == {
            "error": "Bad date",
            "code": "DATE_OUT_OF_RANGE",
            "message": (
                "The selected date is outside the project date range. "
                "Please choose a date within the project timeline."
            ),
            "field": "date",
        }
        assert error.severity == "medium"

    def test_invalid_range_error(self):
        error = InvalidRangeError(date(2024, 6, 3), date(2024, 6, 1))

        assert error.code is ErrorCode.INVALID_DATE_RANGE
        assert "2024-06-01" in error.message
        assert error.start_date == date(2024, 6, 3)

    def test_http_error_status_codes(self):
        assert HttpError(401).code is ErrorCode.UNAUTHORIZED
        assert HttpError(404).code is ErrorCode.PROJECT_NOT_FOUND
        assert HttpError(500).code is ErrorCode.HTTP_ERROR
        assert HttpError(500).severity == "critical"

    def test_network_error(self):
        error = NetworkError()

        assert error.code is ErrorCode.NETWORK_ERROR
        assert "internet connection" in error.user_message

    def test_str_includes_code(self):
        assert str(ValidationError("nope")) == "VALIDATION_ERROR: nope"


# ==============================================================================
# CONFIG
# ==============================================================================

class TestConfig:
    """Tests for get_config and flag parsing."""

    @pytest.mark.parametrize("env, expected", [
        ("local", LocalConfig),
        ("development", LocalConfig),
        ("staging", SandboxConfig),
        ("prod", ProductionConfig),
        ("unknown", LocalConfig),
    ])
    def test_get_config(self, env, expected):
        with patch.dict("os.environ", {"FLASK_ENV": env}):
            assert get_config() is expected

    def test_env_flag(self):
        with patch.dict("os.environ", {"SOME_FLAG": "False"}):
            assert _env_flag("SOME_FLAG", True) is False
        with patch.dict("os.environ", {"SOME_FLAG": "yes"}):
            assert _env_flag("SOME_FLAG", False) is True

    def test_env_flag_default(self):
        with patch.dict("os.environ", {}, clear=True):
            assert _env_flag("SOME_FLAG", True) is True


# ==============================================================================
# LOGGING
# ==============================================================================

class TestBackendCallContext:
    """Tests for BackendCallContext."""

    def test_logs_success(self):
        with patch("talentdesk.logging_config.get_logger") as mock_get_logger:
            with BackendCallContext("GET", "/api/projects/p1") as ctx:
                pass

        logger = mock_get_logger.return_value
        logger.info.assert_called_once()
        assert logger.info.call_args.kwargs["call_id"] == ctx.call_id
        assert logger.info.call_args.kwargs["status"] == "success"

    def test_logs_failure_and_propagates(self):
        with patch("talentdesk.logging_config.get_logger") as mock_get_logger:
            with pytest.raises(NetworkError):
                with BackendCallContext("POST", "/api/projects/p1/archive"):
                    raise NetworkError()

        logger = mock_get_logger.return_value
        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["error_type"] == "NetworkError"


class TestConfigureLogging:
    """Tests for configure_logging handler formatting."""

    def test_console_renders_through_processor_formatter(self):
        configure_logging("INFO")

        handler = logging.getLogger("talentdesk").handlers[0]
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_file_gets_one_json_object_per_line(self, tmp_path):
        log_file = tmp_path / "logs" / "talentdesk.log"

        configure_logging("INFO", str(log_file))
        lines = log_file.read_text().splitlines()

        entry = json.loads(lines[-1])
        assert entry["event"] == "Logging configured"
        assert entry["level"] == "info"
        assert entry["file"] == str(log_file)
