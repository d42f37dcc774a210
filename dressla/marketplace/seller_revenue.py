"""Seller revenue aggregation and the verification threshold."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from dressla.core.models.domain.enums import TransactionType

DEFAULT_THRESHOLD = 100.0


def aggregate_seller_totals(
    items: Iterable[Any],
    seller_by_product: Mapping[int, Optional[str]],
) -> dict[tuple[str, TransactionType], float]:
    """Sum ``price * quantity`` per (seller, SALE|RENT).

    Items without a product or whose product has no seller are skipped, and
    only positive totals are returned.
    """
    totals: dict[tuple[str, TransactionType], float] = {}
    for item in items:
        if item.product_id is None:
            continue
        seller_id = seller_by_product.get(item.product_id)
        if not seller_id:
            continue
        kind = TransactionType.RENT if item.is_rental else TransactionType.SALE
        key = (seller_id, kind)
        totals[key] = totals.get(key, 0.0) + item.price * item.quantity
    return {key: total for key, total in totals.items() if total > 0}


def should_block(verified: bool, blocked: bool, revenue: float, threshold: float = DEFAULT_THRESHOLD) -> bool:
    """Unverified sellers are blocked once their revenue reaches ``threshold``.

    Verified sellers are never blocked and an existing block is kept.
    """
    if verified:
        return False
    if blocked:
        return True
    return revenue >= threshold
