"""
Exception handlers for the FastAPI application.

``global_exception_handler`` catches every unhandled exception and logs it
with an error ID and the request context. ``marketplace_error_handler``
renders business rule failures raised by the services, and
``integrity_error_handler`` turns unique-constraint races into 409.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from dressla.core.logging_config import get_logger
from dressla.server.errors import MarketplaceError

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    """Render a :class:`MarketplaceError` as ``{"detail": ...}`` with its status code."""
    level_log = logger.error if exc.status_code >= 500 else logger.info
    level_log(
        f"Request rejected in {request.method} {request.url.path}: {exc.status_code} {exc.detail}",
        extra={"method": request.method, "path": request.url.path, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, **exc.extra})


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(
        f"Integrity error in {request.method} {request.url.path}: {exc.orig}",
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(status_code=409, content={"detail": "Conflicting record"})


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
