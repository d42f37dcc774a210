"""Errors raised by marketplace services and turned into HTTP responses."""

from __future__ import annotations

from typing import Any, Optional


class MarketplaceError(Exception):
    """A business rule rejected the request.

    Services raise this instead of ``HTTPException`` so they stay usable
    outside a request. ``marketplace_error_handler`` renders it.
    """

    def __init__(self, status_code: int, detail: str, extra: Optional[dict[str, Any]] = None) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.extra = extra or {}

    def __repr__(self) -> str:
        return f"MarketplaceError(status_code={self.status_code}, detail={self.detail!r})"
