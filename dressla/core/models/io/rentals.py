"""
Rental I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from dressla.core.models.domain.enums import RentalStatus

from .common import Pagination, naive_utc


class RentalCreate(BaseModel):
    product_id: int
    variant_id: int
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class RentalUpdate(BaseModel):
    status: Optional[RentalStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class RentalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    product_id: int
    variant_id: Optional[int] = None
    start_date: datetime
    end_date: datetime
    total_price: float
    status: RentalStatus
    created_at: datetime
    updated_at: datetime


class RentalList(BaseModel):
    rentals: List[RentalRead]
    pagination: Pagination
