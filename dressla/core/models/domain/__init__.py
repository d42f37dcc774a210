"""Domain enums for the marketplace.

These types are shared between the SQLModel entities, the API schemas and the
framework-free rules in ``dressla.marketplace``.
"""

from .enums import (
    ApprovalStatus,
    ChatAction,
    ChatStatus,
    Gender,
    OrderStatus,
    PaymentMethod,
    ProductStatus,
    Purpose,
    RentalStatus,
    Role,
    SizeSystem,
    TransactionType,
    VerificationStatus,
)

__all__ = [
    "ApprovalStatus",
    "ChatAction",
    "ChatStatus",
    "Gender",
    "OrderStatus",
    "PaymentMethod",
    "ProductStatus",
    "Purpose",
    "RentalStatus",
    "Role",
    "SizeSystem",
    "TransactionType",
    "VerificationStatus",
]
