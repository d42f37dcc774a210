"""
Unit tests for Logfire middleware.

This test suite covers:
- Request timing and reporting
- The X-Process-Time header
- Slow request warnings
- Failed requests
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from starlette.responses import Response

from dressla.server.middleware.logfire_middleware import SLOW_REQUEST_MS, LogfireMiddleware

MODULE = "dressla.server.middleware.logfire_middleware"


@pytest.fixture
def mock_request():
    request = AsyncMock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/products"
    request.state = MagicMock()
    return request


class TestLogfireMiddlewareDispatch:
    async def test_reports_successful_request(self, mock_request):
        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch(f"{MODULE}.log_api_request") as mock_log:
            response = await middleware.dispatch(mock_request, call_next)

        assert response.status_code == 200
        assert "X-Process-Time" in response.headers
        kwargs = mock_log.call_args[1]
        assert kwargs["method"] == "GET"
        assert kwargs["path"] == "/api/v1/products"
        assert kwargs["status_code"] == 200
        assert kwargs["duration_ms"] >= 0

    async def test_slow_request_is_logged(self, mock_request):
        async def call_next(request):
            return Response(status_code=201)

        middleware = LogfireMiddleware(app=AsyncMock())

        # first call is the start time, second the end time
        with patch(f"{MODULE}.time.time", side_effect=[0.0, (SLOW_REQUEST_MS + 500) / 1000]), patch(
            f"{MODULE}.log_api_request"
        ), patch(f"{MODULE}.logger") as mock_logger:
            await middleware.dispatch(mock_request, call_next)

        mock_logger.warning.assert_called_once()
        assert "Slow API request" in mock_logger.warning.call_args[0][0]

    async def test_failed_request_is_reported_and_reraised(self, mock_request):
        async def call_next(request):
            raise RuntimeError("database down")

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch(f"{MODULE}.log_api_request") as mock_log, patch(f"{MODULE}.logger") as mock_logger:
            with pytest.raises(RuntimeError):
                await middleware.dispatch(mock_request, call_next)

        assert mock_log.call_args[1]["status_code"] == 500
        mock_logger.error.assert_called_once()

    async def test_health_checks_are_not_reported(self, mock_request):
        mock_request.url.path = "/api/v1/health/ready"

        async def call_next(request):
            return Response(status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch(f"{MODULE}.log_api_request") as mock_log:
            response = await middleware.dispatch(mock_request, call_next)

        mock_log.assert_not_called()
        assert "X-Process-Time" in response.headers
