"""
Payment gateway rules for Bank of Georgia (BOG) online payments.

Covers the parts of the integration that are pure data handling:

- mapping gateway order statuses onto :class:`OrderStatus`
- RSA-SHA256 verification of callback signatures
- building the basket and split-payment instructions sent with an order
- reading redirect links out of the create-order response
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional, Sequence

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

from dressla.core.models.domain.enums import OrderStatus

PAYMENT_EVENTS = ("order_payment", "split_payment")

_STATUS_MAP = {
    "completed": OrderStatus.PAID,
    "partial_completed": OrderStatus.PAID,
    "rejected": OrderStatus.CANCELED,
    "blocked": OrderStatus.CANCELED,
    "refunded": OrderStatus.REFUNDED,
    "refunded_partially": OrderStatus.REFUNDED,
}

_CENT = Decimal("0.01")


def map_gateway_status(key: Optional[str]) -> OrderStatus:
    """Translate a BOG ``order_status.key``.

    created, processing, auth_requested, refund_requested and any unknown key
    leave the order PENDING.
    """
    return _STATUS_MAP.get((key or "").lower(), OrderStatus.PENDING)


def verify_callback_signature(signature: str, raw_body: bytes, public_key_pem: str) -> bool:
    """Check a base64 ``Callback-Signature`` over the raw request body.

    Returns False for malformed signatures, malformed keys and mismatches.
    """
    try:
        signature_bytes = base64.b64decode(signature, validate=True)
        public_key = serialization.load_pem_public_key(public_key_pem.encode())
    except (binascii.Error, ValueError):
        return False
    try:
        public_key.verify(signature_bytes, raw_body, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return False
    return True


def build_basket(items: Iterable[Any]) -> list[dict]:
    """Gateway basket lines for order items.

    Raises:
        ValueError: an item has a non-positive quantity or price, or no product.
    """
    basket = []
    for index, item in enumerate(items):
        if item.quantity is None or item.quantity <= 0:
            raise ValueError(f"Invalid quantity for item at index {index}: {item.quantity}")
        if item.price is None or item.price <= 0:
            raise ValueError(f"Invalid price for item at index {index}: {item.price}")
        if item.product_id is None:
            raise ValueError(f"Missing product ID for item at index {index}")
        basket.append({"quantity": item.quantity, "unit_price": item.price, "product_id": str(item.product_id)})
    return basket


@dataclass(frozen=True)
class SellerShare:
    seller_id: str
    iban: Optional[str]
    amount: float


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def calculate_split_payments(
    shares: Sequence[SellerShare],
    order_total: float,
    commission_percent: float,
) -> list[dict]:
    """Per-seller split instructions as percentages of ``order_total``.

    Each seller receives its share of the order net of the platform commission.
    Percentages are rounded to cents and the rounding remainder is assigned to
    the largest share, so that the seller percentages sum to the unrounded net
    total. When every seller has an IBAN and ``order_total`` equals the sum of
    the shares, sellers plus commission add up to exactly 100.

    Sellers without an IBAN cannot be paid out by the gateway; their share
    stays with the platform and is settled manually.
    """
    if order_total <= 0:
        raise ValueError("Order total must be positive")
    if not 0 <= commission_percent < 100:
        raise ValueError("Commission must be within [0, 100)")

    total = Decimal(str(order_total))
    seller_fraction = (Decimal(100) - Decimal(str(commission_percent))) / Decimal(100)

    payable = [share for share in shares if share.iban and share.amount > 0]
    if not payable:
        return []

    raw = [Decimal(str(share.amount)) / total * Decimal(100) * seller_fraction for share in payable]
    rounded = [_to_cents(value) for value in raw]
    remainder = _to_cents(sum(raw, Decimal(0))) - sum(rounded, Decimal(0))
    if remainder:
        largest = max(range(len(rounded)), key=lambda i: rounded[i])
        rounded[largest] += remainder

    return [
        {
            "iban": share.iban,
            "percent": float(percent),
            "amount": float(_to_cents(total * percent / Decimal(100))),
            "description": f"Dressla payout for seller {share.seller_id}",
        }
        for share, percent in zip(payable, rounded)
    ]


def summarize_split(split: Optional[Mapping[str, Any]]) -> Optional[dict]:
    """Condense a callback ``split`` object for logging."""
    if not split:
        return None
    payments = split.get("split_payments") or []
    return {
        "split_status": split.get("split_status"),
        "currency": split.get("currency"),
        "reject_reason": split.get("split_reject_reason"),
        "payments": len(payments),
        "rejected": sum(1 for payment in payments if payment.get("status") == "rejected"),
        "total_percent": sum(payment.get("percent") or 0 for payment in payments),
    }


def extract_redirect_url(response: Mapping[str, Any], site_url: str) -> str:
    """Customer redirect link from a create-order response.

    Raises:
        ValueError: neither links nor an order id are present.
    """
    links = response.get("links") or response.get("_links") or {}
    for name in ("redirect", "approve"):
        href = (links.get(name) or {}).get("href")
        if href:
            return href
    gateway_order_id = response.get("id") or response.get("order_id")
    if gateway_order_id:
        return f"{site_url}?order_id={gateway_order_id}"
    raise ValueError("Redirect URL not found in gateway response")
