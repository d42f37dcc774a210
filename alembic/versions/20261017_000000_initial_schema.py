"""Initial schema and seed data for Dressla

Revision ID: 20261017_000000
Revises: None
Create Date: 2026-10-17 00:00:00.000000

This is the initial migration that creates all marketplace tables and seeds
default data. This includes:
- Accounts (users, verification documents, registration codes)
- Catalog (categories, products, images, size variants, rental price tiers)
- Commerce (carts, orders, delivery cities, rentals, seller transactions)
- Community (reviews, review replies, chat rooms and messages)
- Default categories and delivery cities

Revision format: YYYYMMDD_HHMMSS_description

"""

from datetime import datetime
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261017_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE = sa.Enum("USER", "ADMIN", "SUPPORT", name="role")
VERIFICATION_STATUS = sa.Enum("PENDING", "APPROVED", "REJECTED", name="verificationstatus")
GENDER = sa.Enum("MEN", "WOMEN", "CHILDREN", "UNISEX", name="gender")
SIZE_SYSTEM = sa.Enum("EU", "US", "UK", "CN", name="sizesystem")
PURPOSE = sa.Enum("everyday", "wedding", "sports", "cultural", name="purpose")
PRODUCT_STATUS = sa.Enum("AVAILABLE", "RENTED", "RESERVED", "MAINTENANCE", "DAMAGED", name="productstatus")
APPROVAL_STATUS = sa.Enum("PENDING", "APPROVED", "REJECTED", name="approvalstatus")
ORDER_STATUS = sa.Enum("PENDING", "PAID", "SHIPPED", "CANCELED", "REFUNDED", name="orderstatus")
RENTAL_STATUS = sa.Enum("RESERVED", "ACTIVE", "RETURNED", "LATE", "CANCELED", name="rentalstatus")
TRANSACTION_TYPE = sa.Enum("SALE", "RENT", name="transactiontype")
CHAT_STATUS = sa.Enum("PENDING", "ACTIVE", "CLOSED", name="chatstatus")

ENUM_NAMES = (
    "role",
    "verificationstatus",
    "gender",
    "sizesystem",
    "purpose",
    "productstatus",
    "approvalstatus",
    "orderstatus",
    "rentalstatus",
    "transactiontype",
    "chatstatus",
)


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Accounts
    op.create_table(
        "users",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", ROLE, nullable=False),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("iban", sa.String(64), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("blocked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("banned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ban_reason", sa.String(), nullable=True),
        sa.Column("cookie_consent_essential", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("cookie_consent_performance", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cookie_consent_functional", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cookie_consent_targeting", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cookie_consent_analytics", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cookie_consent_timestamp", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_email", "email", unique=True),
        sa.Index("ix_users_created_at", "created_at"),
    )

    op.create_table(
        "verification_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("id_front_url", sa.String(), nullable=True),
        sa.Column("id_back_url", sa.String(), nullable=True),
        sa.Column("entrepreneur_certificate_url", sa.String(), nullable=True),
        sa.Column("identity_status", VERIFICATION_STATUS, nullable=False),
        sa.Column("identity_comment", sa.String(), nullable=True),
        sa.Column("entrepreneur_status", VERIFICATION_STATUS, nullable=False),
        sa.Column("entrepreneur_comment", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_verification_documents_user_id", "user_id", unique=True),
    )

    op.create_table(
        "registration_codes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("code", sa.String(16), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_registration_codes_email", "email"),
    )

    # Catalog
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.Index("ix_categories_slug", "slug", unique=True),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("brand", sa.String(128), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("sku", sa.String(32), nullable=True),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("gender", GENDER, nullable=False),
        sa.Column("color", sa.String(64), nullable=True),
        sa.Column("location", sa.String(128), nullable=True),
        sa.Column("size_system", SIZE_SYSTEM, nullable=True),
        sa.Column("size", sa.String(32), nullable=True),
        sa.Column("purpose", PURPOSE, nullable=True),
        sa.Column("is_new", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("discount", sa.Float(), nullable=True),
        sa.Column("discount_days", sa.Integer(), nullable=True),
        sa.Column("discount_start_date", sa.DateTime(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_rentable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("price_per_day", sa.Float(), nullable=True),
        sa.Column("max_rental_days", sa.Integer(), nullable=True),
        sa.Column("deposit", sa.Float(), nullable=True),
        sa.Column("status", PRODUCT_STATUS, nullable=False),
        sa.Column("approval_status", APPROVAL_STATUS, nullable=False),
        sa.Column("rejection_reason", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_products_slug", "slug", unique=True),
        sa.Index("ix_products_sku", "sku", unique=True),
        sa.Index("ix_products_gender", "gender"),
        sa.Index("ix_products_category_id", "category_id"),
        sa.Index("ix_products_user_id", "user_id"),
        sa.Index("ix_products_status", "status"),
        sa.Index("ix_products_approval_status", "approval_status"),
        sa.Index("ix_products_created_at", "created_at"),
    )

    op.create_table(
        "product_images",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("alt", sa.String(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_product_images_product_id", "product_id"),
    )

    op.create_table(
        "product_variants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("size", sa.String(32), nullable=True),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sku", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_product_variants_product_id", "product_id"),
    )

    op.create_table(
        "rental_price_tiers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("min_days", sa.Integer(), nullable=False),
        sa.Column("price_per_day", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_rental_price_tiers_product_id", "product_id"),
    )

    # Commerce
    op.create_table(
        "carts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_carts_user_id", "user_id", unique=True),
    )

    op.create_table(
        "cart_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("cart_id", sa.Integer(), sa.ForeignKey("carts.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("product_name", sa.String(), nullable=False),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("size", sa.String(32), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_rental", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rental_start_date", sa.DateTime(), nullable=True),
        sa.Column("rental_end_date", sa.DateTime(), nullable=True),
        sa.Column("rental_days", sa.Integer(), nullable=True),
        sa.Column("deposit", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_cart_items_cart_id", "cart_id"),
        sa.Index("ix_cart_items_product_id", "product_id"),
    )

    op.create_table(
        "delivery_cities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("customer_name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("delivery_city_id", sa.Integer(), sa.ForeignKey("delivery_cities.id"), nullable=True),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("payment_id", sa.String(128), nullable=True),
        sa.Column("total", sa.Float(), nullable=False),
        sa.Column("status", ORDER_STATUS, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_orders_user_id", "user_id"),
        sa.Index("ix_orders_payment_id", "payment_id"),
        sa.Index("ix_orders_status", "status"),
        sa.Index("ix_orders_created_at", "created_at"),
    )

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=True),
        sa.Column("product_name", sa.String(), nullable=False),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("size", sa.String(32), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_rental", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rental_start_date", sa.DateTime(), nullable=True),
        sa.Column("rental_end_date", sa.DateTime(), nullable=True),
        sa.Column("rental_days", sa.Integer(), nullable=True),
        sa.Column("deposit", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_order_items_order_id", "order_id"),
        sa.Index("ix_order_items_product_id", "product_id"),
    )

    op.create_table(
        "rentals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("variant_id", sa.Integer(), sa.ForeignKey("product_variants.id"), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("total_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", RENTAL_STATUS, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_rentals_user_id", "user_id"),
        sa.Index("ix_rentals_product_id", "product_id"),
        sa.Index("ix_rentals_variant_id", "variant_id"),
        sa.Index("ix_rentals_start_date", "start_date"),
        sa.Index("ix_rentals_end_date", "end_date"),
        sa.Index("ix_rentals_status", "status"),
        sa.Index("ix_rentals_created_at", "created_at"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("buyer_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=True),
        sa.Column("rental_id", sa.Integer(), sa.ForeignKey("rentals.id"), nullable=True),
        sa.Column("type", TRANSACTION_TYPE, nullable=False),
        sa.Column("total", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_transactions_user_id", "user_id"),
        sa.Index("ix_transactions_order_id", "order_id"),
        sa.Index("ix_transactions_created_at", "created_at"),
    )

    # Community
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_reviews_product_id", "product_id"),
        sa.Index("ix_reviews_user_id", "user_id"),
        sa.Index("ix_reviews_created_at", "created_at"),
    )

    op.create_table(
        "review_replies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("review_id", sa.Integer(), sa.ForeignKey("reviews.id"), nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("comment", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_review_replies_review_id", "review_id", unique=True),
    )

    op.create_table(
        "chat_rooms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("admin_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=True),
        sa.Column("guest_name", sa.String(), nullable=True),
        sa.Column("guest_email", sa.String(), nullable=True),
        sa.Column("status", CHAT_STATUS, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_chat_rooms_user_id", "user_id"),
        sa.Index("ix_chat_rooms_admin_id", "admin_id"),
        sa.Index("ix_chat_rooms_status", "status"),
        sa.Index("ix_chat_rooms_updated_at", "updated_at"),
    )

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("chat_rooms.id"), nullable=False),
        sa.Column("content", sa.String(1000), nullable=False),
        sa.Column("is_from_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("admin_id", sa.String(32), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_chat_messages_room_id", "room_id"),
        sa.Index("ix_chat_messages_created_at", "created_at"),
    )

    # Seed data
    now = datetime.utcnow()

    categories = sa.table(
        "categories",
        sa.column("name", sa.String),
        sa.column("slug", sa.String),
        sa.column("description", sa.String),
        sa.column("created_at", sa.DateTime),
    )
    op.bulk_insert(
        categories,
        [
            {"name": "Dresses", "slug": "dresses", "description": "Evening, cocktail and everyday dresses", "created_at": now},
            {"name": "Suits", "slug": "suits", "description": "Suits and tuxedos", "created_at": now},
            {"name": "Traditional", "slug": "traditional", "description": "Chokha and traditional costumes", "created_at": now},
            {"name": "Shoes", "slug": "shoes", "description": None, "created_at": now},
            {"name": "Accessories", "slug": "accessories", "description": None, "created_at": now},
        ],
    )

    delivery_cities = sa.table(
        "delivery_cities",
        sa.column("name", sa.String),
        sa.column("price", sa.Float),
        sa.column("is_active", sa.Boolean),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    op.bulk_insert(
        delivery_cities,
        [
            {"name": name, "price": price, "is_active": True, "created_at": now, "updated_at": now}
            for name, price in (("Tbilisi", 5.0), ("Batumi", 10.0), ("Kutaisi", 10.0), ("Rustavi", 7.0))
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("chat_messages")
    op.drop_table("chat_rooms")
    op.drop_table("review_replies")
    op.drop_table("reviews")
    op.drop_table("transactions")
    op.drop_table("rentals")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("delivery_cities")
    op.drop_table("cart_items")
    op.drop_table("carts")
    op.drop_table("rental_price_tiers")
    op.drop_table("product_variants")
    op.drop_table("product_images")
    op.drop_table("products")
    op.drop_table("categories")
    op.drop_table("registration_codes")
    op.drop_table("verification_documents")
    op.drop_table("users")

    # Drop the enum types
    for name in ENUM_NAMES:
        op.execute(f"DROP TYPE IF EXISTS {name}")
