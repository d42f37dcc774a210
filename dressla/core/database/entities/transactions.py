"""
Seller transaction ledger.

One row per (seller, order, SALE|RENT) records the revenue a seller earned from
an order. The ledger drives the verification revenue threshold.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from dressla.core.models.domain.enums import TransactionType

from ..base import Base, utc_now


class Transaction(Base, table=True):
    """Table: transactions"""

    __tablename__ = "transactions"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    buyer_id: Optional[str] = Field(default=None, foreign_key="users.id")
    order_id: Optional[int] = Field(default=None, foreign_key="orders.id", index=True)
    rental_id: Optional[int] = Field(default=None, foreign_key="rentals.id")
    type: TransactionType
    total: float
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Transaction(id={self.id}, user_id={self.user_id}, type={self.type}, total={self.total})"
