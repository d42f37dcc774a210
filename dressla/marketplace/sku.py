"""Numeric SKU generation.

A SKU is the 13-digit millisecond timestamp followed by random digits, so codes
are sortable by creation time and contain only digits.
"""

from __future__ import annotations

import asyncio
import secrets
import time
from typing import Awaitable, Callable

MAX_ATTEMPTS = 10


def _timestamp_ms() -> str:
    return str(int(time.time() * 1000))


def _random_digits(count: int) -> str:
    return str(secrets.randbelow(10**count)).zfill(count)


def generate_sku(random_digits: int = 3) -> str:
    """Timestamp plus ``random_digits`` random digits (16 digits by default)."""
    return f"{_timestamp_ms()}{_random_digits(random_digits)}"


async def generate_unique_sku(
    exists: Callable[[str], Awaitable[bool]],
    max_attempts: int = MAX_ATTEMPTS,
) -> str:
    """Generate a SKU that ``exists`` reports as free.

    Retries up to ``max_attempts`` times with a short pause so the timestamp
    moves on, then widens the random part to 6 and finally 8 digits.
    """
    for _ in range(max_attempts):
        sku = generate_sku()
        if not await exists(sku):
            return sku
        await asyncio.sleep(0.01)

    fallback = generate_sku(random_digits=6)
    if not await exists(fallback):
        return fallback
    return generate_sku(random_digits=8)
