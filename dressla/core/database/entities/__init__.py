"""
Database entity models.

This package contains all database entity models organized by business domain.

Modules:
- users: accounts, verification documents and registration codes
- catalog: categories, products, images, variants and rental price tiers
- carts: shopping carts and their items
- orders: checkout orders and order items
- rentals: dated rental reservations
- transactions: seller revenue ledger
- reviews: product reviews and staff replies
- chat: chat rooms and messages
- delivery_cities: shipping destinations
"""

from . import (
    carts,
    catalog,
    chat,
    delivery_cities,
    orders,
    rentals,
    reviews,
    transactions,
    users,
)
from .carts import Cart, CartItem
from .catalog import Category, Product, ProductImage, ProductVariant, RentalPriceTier
from .chat import ChatMessage, ChatRoom
from .delivery_cities import DeliveryCity
from .orders import Order, OrderItem
from .rentals import Rental
from .reviews import Review, ReviewReply
from .transactions import Transaction
from .users import RegistrationCode, User, VerificationDocument

__all__ = [
    "carts",
    "catalog",
    "chat",
    "delivery_cities",
    "orders",
    "rentals",
    "reviews",
    "transactions",
    "users",
    "Cart",
    "CartItem",
    "Category",
    "ChatMessage",
    "ChatRoom",
    "DeliveryCity",
    "Order",
    "OrderItem",
    "Product",
    "ProductImage",
    "ProductVariant",
    "RegistrationCode",
    "Rental",
    "RentalPriceTier",
    "Review",
    "ReviewReply",
    "Transaction",
    "User",
    "VerificationDocument",
]
