"""
Order entity models.

Orders are created from a user's cart at checkout and tracked through the
payment gateway by ``payment_id``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from dressla.core.models.domain.enums import OrderStatus

from ..base import Base, utc_now


class Order(Base, table=True):
    """Table: orders"""

    __tablename__ = "orders"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    customer_name: str = Field(default="Customer")
    phone: Optional[str] = Field(default=None)
    email: Optional[str] = Field(default=None)
    address: Optional[str] = Field(default=None)
    city: Optional[str] = Field(default=None)
    delivery_city_id: Optional[int] = Field(default=None, foreign_key="delivery_cities.id")
    payment_method: Optional[str] = Field(default=None)
    payment_id: Optional[str] = Field(default=None, index=True, max_length=128)
    total: float
    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Order(id={self.id}, status={self.status}, total={self.total})"


class OrderItem(Base, table=True):
    """Snapshot of a cart line at checkout time.

    ``product_id`` is nullable so history survives product removal.

    Table: order_items
    """

    __tablename__ = "order_items"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="orders.id", index=True)
    product_id: Optional[int] = Field(default=None, foreign_key="products.id", index=True)
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
