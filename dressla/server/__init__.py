"""
Dressla Server Package.

This package contains the web server implementation for the Dressla marketplace.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    exception_handlers: Error to HTTP response translation.
    middleware: Request tracing middleware.
    services: Security, checkout, payment gateway and notification services.
"""
