"""
Cart I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .common import naive_utc


class CartItemCreate(BaseModel):
    product_id: int
    size: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    is_rental: bool = False
    rental_start_date: Optional[datetime] = None
    rental_end_date: Optional[datetime] = None

    @field_validator("rental_start_date", "rental_end_date")
    @classmethod
    def _naive_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)

    @model_validator(mode="after")
    def _rental_dates(self) -> "CartItemCreate":
        if self.is_rental:
            if not self.rental_start_date or not self.rental_end_date:
                raise ValueError("Rental items need a start and end date")
            if self.rental_start_date > self.rental_end_date:
                raise ValueError("Rental start date must be before the end date")
        return self


class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=1)


class CartItemRead(BaseModel):
    """Cart line with the product discount applied to ``price``."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: str
    image: Optional[str] = None
    size: Optional[str] = None
    price: float
    original_price: float
    discount: Optional[float] = None
    quantity: int
    is_rental: bool
    rental_start_date: Optional[datetime] = None
    rental_end_date: Optional[datetime] = None
    rental_days: Optional[int] = None
    deposit: Optional[float] = None


class CartRead(BaseModel):
    id: Optional[int] = None
    items: List[CartItemRead] = Field(default_factory=list)
    total_items: int = Field(default=0, serialization_alias="totalItems")
    total_price: float = Field(default=0.0, serialization_alias="totalPrice")
