"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Environment variable parsing
- Initialization with and without a token
- Instrumentation feature flags and failures
- Request and payment event logging
"""

import importlib
import os
from unittest.mock import MagicMock, patch

import pytest

import dressla.core.monitoring as monitoring_module


@pytest.fixture(autouse=True)
def _restore_monitoring():
    yield
    importlib.reload(monitoring_module)


def _reload(env: dict):
    with patch.dict(os.environ, env, clear=True):
        return importlib.reload(monitoring_module)


class TestLogfireEnvironmentConfiguration:
    """Test environment variable configuration for Logfire."""

    def test_logfire_disabled_by_default(self):
        assert _reload({}).LOGFIRE_ENABLED is False

    @pytest.mark.parametrize("value", ["true", "1", "yes", "TRUE"])
    def test_logfire_enabled_values(self, value):
        assert _reload({"LOGFIRE_ENABLED": value}).LOGFIRE_ENABLED is True

    def test_settings_from_environment(self):
        module = _reload(
            {
                "LOGFIRE_TOKEN": "token-123",
                "LOGFIRE_SERVICE_NAME": "dressla-staging",
                "LOGFIRE_ENVIRONMENT": "staging",
                "LOGFIRE_SAMPLE_RATE": "0.25",
                "LOGFIRE_TRACE_SQLALCHEMY": "false",
            }
        )

        assert module.LOGFIRE_TOKEN == "token-123"
        assert module.LOGFIRE_SERVICE_NAME == "dressla-staging"
        assert module.LOGFIRE_ENVIRONMENT == "staging"
        assert module.LOGFIRE_SAMPLE_RATE == 0.25
        assert module.LOGFIRE_TRACE_SQLALCHEMY is False
        assert module.LOGFIRE_TRACE_HTTPX is True


class TestInitializeLogfire:
    def test_disabled_does_not_configure(self):
        module = _reload({})

        with patch.object(module, "logfire") as mock_logfire:
            assert module.initialize_logfire() is False

        mock_logfire.configure.assert_not_called()

    def test_enabled_without_token(self):
        module = _reload({"LOGFIRE_ENABLED": "true"})

        with patch.object(module, "logfire") as mock_logfire:
            assert module.initialize_logfire() is False

        mock_logfire.configure.assert_not_called()

    def test_configures_and_instruments(self):
        module = _reload({"LOGFIRE_ENABLED": "true", "LOGFIRE_TOKEN": "token"})
        app = MagicMock()

        with patch.object(module, "logfire") as mock_logfire:
            assert module.initialize_logfire(app) is True

        mock_logfire.configure.assert_called_once()
        assert mock_logfire.configure.call_args.kwargs["service_name"] == "dressla-server"
        mock_logfire.instrument_sqlalchemy.assert_called_once()
        mock_logfire.instrument_httpx.assert_called_once()
        mock_logfire.instrument_fastapi.assert_called_once_with(app=app)

    def test_fastapi_needs_an_app(self):
        module = _reload({"LOGFIRE_ENABLED": "true", "LOGFIRE_TOKEN": "token"})

        with patch.object(module, "logfire") as mock_logfire:
            module.initialize_logfire()

        mock_logfire.instrument_fastapi.assert_not_called()

    def test_instrumentation_failure_is_tolerated(self):
        module = _reload({"LOGFIRE_ENABLED": "true", "LOGFIRE_TOKEN": "token"})

        with patch.object(module, "logfire") as mock_logfire:
            mock_logfire.instrument_httpx.side_effect = RuntimeError("missing extra")
            assert module.initialize_logfire() is True

        mock_logfire.instrument_sqlalchemy.assert_called_once()


class TestEventLogging:
    def test_api_request_skipped_when_not_initialized(self):
        module = _reload({})

        with patch.object(module, "logfire") as mock_logfire:
            module.log_api_request("GET", "/api/v1/health", 200, 1.5)

        mock_logfire.info.assert_not_called()

    def test_api_request_when_initialized(self):
        module = _reload({})

        with patch.object(module, "logfire") as mock_logfire, patch.object(module, "_initialized", True):
            module.log_api_request("GET", "/api/v1/health", 200, 1.5)

        mock_logfire.info.assert_called_once()
        assert mock_logfire.info.call_args.kwargs["status_code"] == 200

    def test_payment_event_always_logged_locally(self):
        module = _reload({})

        with patch.object(module, "logger") as mock_logger, patch.object(module, "logfire") as mock_logfire:
            module.log_payment_event("callback_processed", 12, status="PAID")

        mock_logger.info.assert_called_once()
        assert mock_logger.info.call_args.kwargs["extra"]["payment_event"] == "callback_processed"
        mock_logfire.info.assert_not_called()

    def test_payment_event_sent_to_logfire(self):
        module = _reload({})

        with patch.object(module, "logfire") as mock_logfire, patch.object(module, "_initialized", True):
            module.log_payment_event("order_created", 3, amount=50.0)

        assert mock_logfire.info.call_args.kwargs == {"event": "order_created", "order_id": 3, "amount": 50.0}
