"""Product slug normalisation and de-duplication."""

from __future__ import annotations

import re
from typing import Awaitable, Callable

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-+")

DEFAULT_SLUG = "product"


def sanitize_slug(value: str) -> str:
    """Lowercase ``value`` and keep only ``[a-z0-9-]``.

    Every other character becomes a dash, dash runs collapse into one and
    leading or trailing dashes are stripped. An empty result falls back to
    ``"product"``.

    >>> sanitize_slug("  Red Dress -- 2024! ")
    'red-dress-2024'
    """
    slug = _INVALID_CHARS.sub("-", value.lower().strip())
    slug = _DASH_RUNS.sub("-", slug).strip("-")
    return slug or DEFAULT_SLUG


async def ensure_unique_slug(raw_slug: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """Return the sanitized slug, suffixed with ``-1``, ``-2``... until ``exists`` is false.

    Args:
        raw_slug: Slug or name supplied by the seller
        exists: Async predicate telling whether a candidate is already taken
            (the caller excludes the product being edited)
    """
    base = sanitize_slug(raw_slug)
    candidate = base
    suffix = 1
    while await exists(candidate):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate
