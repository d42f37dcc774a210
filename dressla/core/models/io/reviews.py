"""
Review I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewReplyCreate(BaseModel):
    review_id: int
    comment: str = Field(min_length=1)


class ReviewReplyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    review_id: int
    user_id: str
    comment: str
    created_at: datetime
    updated_at: datetime


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    user_id: str
    user_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    reply: Optional[ReviewReplyRead] = None


class ReviewList(BaseModel):
    reviews: List[ReviewRead]
    average_rating: float = Field(serialization_alias="averageRating")
    total_reviews: int = Field(serialization_alias="totalReviews")
    can_review: bool = Field(serialization_alias="canReview")
