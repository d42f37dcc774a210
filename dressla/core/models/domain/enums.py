"""Domain enums shared by entities, schemas and business rules."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role. SUPPORT staff moderate users and orders but cannot manage admins."""

    USER = "USER"
    ADMIN = "ADMIN"
    SUPPORT = "SUPPORT"


class VerificationStatus(str, Enum):
    """Review state of an identity or entrepreneur document."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Gender(str, Enum):
    MEN = "MEN"
    WOMEN = "WOMEN"
    CHILDREN = "CHILDREN"
    UNISEX = "UNISEX"


class SizeSystem(str, Enum):
    EU = "EU"
    US = "US"
    UK = "UK"
    CN = "CN"


class Purpose(str, Enum):
    """Occasion a product is listed for."""

    everyday = "everyday"
    wedding = "wedding"
    sports = "sports"
    cultural = "cultural"


class ProductStatus(str, Enum):
    """Physical availability of a listed item."""

    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"
    RESERVED = "RESERVED"
    MAINTENANCE = "MAINTENANCE"
    DAMAGED = "DAMAGED"


class ApprovalStatus(str, Enum):
    """Moderation state of a product listing."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RentalStatus(str, Enum):
    """Lifecycle of a rental reservation."""

    RESERVED = "RESERVED"
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    LATE = "LATE"
    CANCELED = "CANCELED"


class OrderStatus(str, Enum):
    """Lifecycle of a checkout order."""

    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    CANCELED = "CANCELED"
    REFUNDED = "REFUNDED"


class TransactionType(str, Enum):
    SALE = "SALE"
    RENT = "RENT"


class ChatStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class ChatAction(str, Enum):
    """Moderator actions on a chat room."""

    assign = "assign"
    close = "close"


class PaymentMethod(str, Enum):
    card = "card"
    google_pay = "google_pay"


# Rentals that hold a variant for their date range.
BLOCKING_RENTAL_STATUSES = (RentalStatus.RESERVED, RentalStatus.ACTIVE)

# Orders whose rental items still hold a variant.
BLOCKING_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.SHIPPED)
