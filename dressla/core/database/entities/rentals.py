"""
Rental entity model.

A rental reserves one product variant for an inclusive date range.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from dressla.core.models.domain.enums import RentalStatus

from ..base import Base, utc_now


class Rental(Base, table=True):
    """Table: rentals"""

    __tablename__ = "rentals"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    variant_id: Optional[int] = Field(default=None, foreign_key="product_variants.id", index=True)
    start_date: datetime = Field(index=True)
    end_date: datetime = Field(index=True)
    total_price: float = Field(default=0.0)
    status: RentalStatus = Field(default=RentalStatus.RESERVED, index=True)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return (
            f"Rental(id={self.id}, variant_id={self.variant_id}, "
            f"{self.start_date:%Y-%m-%d}..{self.end_date:%Y-%m-%d}, status={self.status})"
        )
