"""
Delivery city I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DeliveryCityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    is_active: bool


class DeliveryCityCreate(BaseModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    is_active: bool = True


class DeliveryCityUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
