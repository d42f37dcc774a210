"""
Core utilities and configuration for Dressla.

This package provides core functionality including logging configuration,
database setup, and other shared utilities.
"""

from dressla.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
