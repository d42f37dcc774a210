"""
Monitoring and Tracing Configuration Module.

This module wires Pydantic Logfire into the marketplace server:
- API endpoint tracing
- Database operation monitoring
- Outbound payment gateway calls (HTTPX)
- Structured payment and request events

Tracing is opt-in through ``LOGFIRE_ENABLED`` and needs ``LOGFIRE_TOKEN``.
"""

import logging
import os
from typing import Any, Optional

import logfire
from fastapi import FastAPI

from dressla import __version__

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "dressla-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", __version__)

# Sampling configuration
LOGFIRE_SAMPLE_RATE = float(os.getenv("LOGFIRE_SAMPLE_RATE", "1.0"))

# Feature flags
LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")

_initialized = False


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """Configure Logfire and instrument SQLAlchemy, HTTPX and, when given, the ``app``.

    Returns False when monitoring stays disabled (flag off or no token).
    """
    global _initialized

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    logfire.configure(
        token=LOGFIRE_TOKEN,
        service_name=LOGFIRE_SERVICE_NAME,
        service_version=LOGFIRE_SERVICE_VERSION,
        environment=LOGFIRE_ENVIRONMENT,
        sampling=logfire.SamplingOptions(head=LOGFIRE_SAMPLE_RATE),
    )

    instrumentors = [
        (LOGFIRE_TRACE_SQLALCHEMY, "SQLAlchemy", lambda: logfire.instrument_sqlalchemy()),
        (LOGFIRE_TRACE_HTTPX, "HTTPX", lambda: logfire.instrument_httpx()),
        (LOGFIRE_TRACE_FASTAPI and app is not None, "FastAPI", lambda: logfire.instrument_fastapi(app=app)),
    ]
    for enabled, name, instrument in instrumentors:
        if not enabled:
            continue
        # instrumentation extras are optional installs
        try:
            instrument()
        except Exception as e:
            logger.warning(f"Failed to instrument {name}: {e}")
        else:
            logger.info(f"Logfire: {name} instrumentation enabled")

    _initialized = True
    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
    return True


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not _initialized:
        return
    logfire.info(
        "API request completed",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def log_payment_event(event: str, order_id: Optional[int], **attributes: Any) -> None:
    """
    Record a payment lifecycle event (order created, callback processed, refund...).

    Args:
        event: Short event name
        order_id: Marketplace order id when known
        attributes: Extra structured attributes
    """
    logger.info(f"Payment event {event} for order {order_id}", extra={"payment_event": event, **attributes})
    if not _initialized:
        return
    logfire.info("Payment event {event}", event=event, order_id=order_id, **attributes)
