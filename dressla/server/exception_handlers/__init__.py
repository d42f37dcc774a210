"""
Exception handlers for the Dressla server.

This package contains custom exception handlers for different error types
and a setup function to register them with the FastAPI application.
"""

from .global_handler import (
    global_exception_handler,
    marketplace_error_handler,
    setup_exception_handlers,
)

__all__ = ["global_exception_handler", "marketplace_error_handler", "setup_exception_handlers"]
