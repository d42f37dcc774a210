"""
Product review entity models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Review(Base, table=True):
    """Buyer review of a product, rated 1 to 5.

    Table: reviews
    """

    __tablename__ = "reviews"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    rating: int
    comment: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)


class ReviewReply(Base, table=True):
    """Single staff reply attached to a review.

    Table: review_replies
    """

    __tablename__ = "review_replies"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    review_id: int = Field(foreign_key="reviews.id", unique=True, index=True)
    user_id: str = Field(foreign_key="users.id")
    comment: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
