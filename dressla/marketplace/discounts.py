"""Time-limited product discounts.

A discount is an absolute amount taken off the price. It runs for
``discount_days`` days from ``discount_start_date``; a product missing any of
the three fields has no active discount.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional


def discount_expires_at(product: Any) -> Optional[datetime]:
    if not product.discount or not product.discount_days or not product.discount_start_date:
        return None
    return product.discount_start_date + timedelta(days=product.discount_days)


def is_discount_expired(product: Any, now: Optional[datetime] = None) -> bool:
    expires_at = discount_expires_at(product)
    if expires_at is None:
        return False
    return (now or datetime.utcnow()) > expires_at


def clear_discount(product: Any) -> None:
    product.discount = None
    product.discount_days = None
    product.discount_start_date = None


def process_expired_discount(product: Any, now: Optional[datetime] = None) -> bool:
    """Clear an expired discount on ``product`` in memory.

    Nothing is persisted; callers that want the change stored add the product
    to their session. Returns True when the discount was cleared.
    """
    if not is_discount_expired(product, now):
        return False
    clear_discount(product)
    return True


def discounted_price(price: float, discount: Optional[float]) -> float:
    """Price after an absolute discount, never below zero."""
    if not discount:
        return price
    return max(price - discount, 0.0)
