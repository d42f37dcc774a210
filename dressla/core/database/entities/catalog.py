"""
Catalog entity models.

This module contains the database entities for the product catalog: categories,
product listings and their images, per-size variants and rental price tiers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from dressla.core.models.domain.enums import (
    ApprovalStatus,
    Gender,
    ProductStatus,
    Purpose,
    SizeSystem,
)

from ..base import Base, utc_now


class Category(Base, table=True):
    """Product category.

    Table: categories
    """

    __tablename__ = "categories"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, max_length=128)
    slug: str = Field(unique=True, index=True, max_length=128)
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Category(id={self.id}, slug={self.slug})"


class Product(Base, table=True):
    """Product listing offered for sale, rent or both.

    Listings created by regular users start in ``PENDING`` approval and are only
    shown in the public catalog once approved. ``status`` tracks the physical
    item (reserved after a sale, rented, under maintenance...).

    Table: products
    """

    __tablename__ = "products"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    slug: str = Field(unique=True, index=True, max_length=255)
    brand: Optional[str] = Field(default=None, max_length=128)
    description: Optional[str] = Field(default=None)
    sku: Optional[str] = Field(default=None, unique=True, index=True, max_length=32)
    stock: int = Field(default=0)

    gender: Gender = Field(default=Gender.UNISEX, index=True)
    color: Optional[str] = Field(default=None, max_length=64)
    location: Optional[str] = Field(default=None, max_length=128)
    size_system: Optional[SizeSystem] = Field(default=None)
    size: Optional[str] = Field(default=None, max_length=32)
    purpose: Optional[Purpose] = Field(default=None)
    is_new: bool = Field(default=False)

    discount: Optional[float] = Field(default=None)
    discount_days: Optional[int] = Field(default=None)
    discount_start_date: Optional[datetime] = Field(default=None)

    rating: float = Field(default=0.0)
    category_id: Optional[int] = Field(default=None, foreign_key="categories.id", index=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)

    is_rentable: bool = Field(default=False)
    price_per_day: Optional[float] = Field(default=None)
    max_rental_days: Optional[int] = Field(default=None)
    deposit: Optional[float] = Field(default=None)

    status: ProductStatus = Field(default=ProductStatus.AVAILABLE, index=True)
    approval_status: ApprovalStatus = Field(default=ApprovalStatus.PENDING, index=True)
    rejection_reason: Optional[str] = Field(default=None)
    approved_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Product(id={self.id}, slug={self.slug}, status={self.status})"


class ProductImage(Base, table=True):
    """Ordered product photo.

    Table: product_images
    """

    __tablename__ = "product_images"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    url: str
    alt: Optional[str] = Field(default=None)
    position: int = Field(default=0)


class ProductVariant(Base, table=True):
    """Per-size price and stock of a product.

    Table: product_variants
    """

    __tablename__ = "product_variants"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    size: Optional[str] = Field(default=None, max_length=32)
    price: float = Field(default=0.0)
    stock: int = Field(default=0)
    sku: Optional[str] = Field(default=None, max_length=64)

    def __repr__(self) -> str:
        return f"ProductVariant(id={self.id}, product_id={self.product_id}, size={self.size})"


class RentalPriceTier(Base, table=True):
    """Daily rental price that applies from ``min_days`` onwards.

    Table: rental_price_tiers
    """

    __tablename__ = "rental_price_tiers"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    min_days: int
    price_per_day: float
