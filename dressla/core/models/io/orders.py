"""
Order I/O models for checkout and order management.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from dressla.core.models.domain.enums import OrderStatus, PaymentMethod


class ShippingAddress(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None


class CheckoutRequest(BaseModel):
    address: Optional[ShippingAddress] = None
    delivery_city_id: Optional[int] = None
    payment_method: PaymentMethod = PaymentMethod.card
    google_pay_token: Optional[str] = None

    @model_validator(mode="after")
    def _google_pay_token(self) -> "CheckoutRequest":
        if self.payment_method == PaymentMethod.google_pay and not self.google_pay_token:
            raise ValueError("google_pay_token is required for Google Pay payments")
        return self


class CheckoutResult(BaseModel):
    order_id: int
    payment_id: Optional[str] = None
    redirect_url: Optional[str] = None
    status: OrderStatus


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: str
    image: Optional[str] = None
    size: Optional[str] = None
    price: float
    quantity: int
    is_rental: bool
    rental_start_date: Optional[datetime] = None
    rental_end_date: Optional[datetime] = None
    rental_days: Optional[int] = None
    deposit: Optional[float] = None


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[str] = None
    customer_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    payment_method: Optional[str] = None
    payment_id: Optional[str] = None
    total: float
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead] = Field(default_factory=list)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
