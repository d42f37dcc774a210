"""
Shopping cart entity models.

A cart belongs to exactly one user and is created on first use. Cart items
snapshot the product name, image and price at the time they were added.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Cart(Base, table=True):
    """Table: carts"""

    __tablename__ = "carts"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class CartItem(Base, table=True):
    """Line in a cart, either a purchase or a dated rental.

    Table: cart_items
    """

    __tablename__ = "cart_items"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(foreign_key="carts.id", index=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    product_name: str
    image: Optional[str] = Field(default=None)
    size: Optional[str] = Field(default=None, max_length=32)
    price: float
    quantity: int = Field(default=1)

    is_rental: bool = Field(default=False)
    rental_start_date: Optional[datetime] = Field(default=None)
    rental_end_date: Optional[datetime] = Field(default=None)
    rental_days: Optional[int] = Field(default=None)
    deposit: Optional[float] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"CartItem(id={self.id}, product_id={self.product_id}, qty={self.quantity}, rental={self.is_rental})"
